
class MetricNames:
    TOTAL_TRADES = "Total Trades"
    WIN_RATE = "Win Rate"
    WIN_LOSS_BE = "W/L/BE"
    TOTAL_PL = "Total P/L"
    TRUE_REWARD = "True Reward"
    TRUE_TP_SL = "True TP/SL"
    MAX_CONSECUTIVE_LOSSES = "Max Consecutive Losses"
    MAX_CONSECUTIVE_WINS = "Max Consecutive Wins"

    @staticmethod
    def overview_rows(overview):
        """(label, formatted value) pairs for printing a PerformanceOverview."""
        return [
            (MetricNames.TOTAL_TRADES, str(overview.total_trades)),
            (MetricNames.WIN_RATE, f"{overview.win_rate}%"),
            (MetricNames.WIN_LOSS_BE, f"{overview.winning_trades}/{overview.losing_trades}/{overview.breakeven_trades}"),
            (MetricNames.TOTAL_PL, f"{overview.total_profit_loss:+,.2f}"),
            (MetricNames.TRUE_REWARD, f"{overview.total_true_reward:.2f}"),
            (MetricNames.TRUE_TP_SL, f"{overview.total_pips:.1f}"),
            (MetricNames.MAX_CONSECUTIVE_LOSSES, str(overview.max_consecutive_losses)),
            (MetricNames.MAX_CONSECUTIVE_WINS, str(overview.max_consecutive_wins)),
        ]
