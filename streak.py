class Streak:
    """
    Tracks consecutive wins (positive streak) and losses (negative streak)
    over trades fed in chronological order. A breakeven trade ends either kind.
    """

    def __init__(self):
        self.streak = 0
        self.best_streak = 0
        self.worst_streak = 0

    def process(self, profit_loss):
        """
        Processes a trade result and updates the streak.

        Args:
            profit_loss (float): The trade's outcome. >0 win, <0 loss, 0 breakeven.
        """
        if profit_loss > 0:
            self.streak = self.streak + 1 if self.streak > 0 else 1
        elif profit_loss < 0:
            self.streak = self.streak - 1 if self.streak < 0 else -1
        else:
            self.streak = 0

        self.best_streak = max(self.best_streak, self.streak)
        self.worst_streak = min(self.worst_streak, self.streak)

    @property
    def max_consecutive_wins(self):
        return self.best_streak

    @property
    def max_consecutive_losses(self):
        return abs(self.worst_streak)
