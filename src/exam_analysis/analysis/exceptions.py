class NoResponsesError(ValueError):
    """Raised when there are no student responses left to analyze."""

    def __init__(
        self, message: str = "No student responses found for analysis."
    ) -> None:
        super().__init__(message)
