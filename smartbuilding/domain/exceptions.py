class InvalidCreditRequest(Exception):
    """Raised when a buy/sell/transfer request fails validation."""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(f"Invalid credit request: {reason}")


class PricingNotConfigured(Exception):
    """Raised when no price is available for a metric."""

    def __init__(self, metric):
        self.metric = metric
        super().__init__(f"No price configured for metric: {metric}")


class NoActiveUnits(Exception):
    """Raised by admin bulk operations when there is no active unit to act on."""

    def __init__(self):
        super().__init__("No active units")


class InvalidPreset(Exception):
    def __init__(self, preset):
        self.preset = preset
        super().__init__(f"Unknown simulation preset: {preset}")


class ResetNotConfirmed(Exception):
    """Raised when a destructive admin reset is requested without confirmation."""

    def __init__(self):
        super().__init__("Reset requires explicit confirmation")


class UpdateReplay(Exception):
    """Raised when an inbound update id was already processed by the worker."""

    def __init__(self, worker, update_id, last_update_id):
        self.worker = worker
        self.update_id = update_id
        self.last_update_id = last_update_id
        super().__init__(
            f"Update {update_id} already processed by {worker} (watermark {last_update_id})"
        )
