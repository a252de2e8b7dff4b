class DEFAULT:
    trades_directory = "data/exports"
    trades_file_pattern = r"trades.*\.(json|jsonl|csv)$"
    merge_exports = False
    log_level = "WARNING"
    combination_limit = 15
    combination_separator = " + "
    unknown_label = "Unknown"
    rules_profile_dir = "rule_profiles"
    rules_default_profile = "default"
