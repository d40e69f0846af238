class DeviceNotFoundError(RuntimeError):
    """Raised when no enumerated HID interface matches the target."""
    def __init__(self, message, target=None, candidates=0):
        super().__init__(message)
        self.target = target
        self.candidates = candidates  # size of the enumeration snapshot
