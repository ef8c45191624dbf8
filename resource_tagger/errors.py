class TaggerError(Exception):
    pass


class InvalidEvent(TaggerError):
    pass


class ResourceNotFound(TaggerError):
    pass


class LookupFailed(TaggerError):
    def __init__(self, resource_id: str, cause: Exception):
        super().__init__(f"lookup failed for {resource_id}: {cause}")
        self.resource_id = resource_id
        self.cause = cause


class WriteFailed(TaggerError):
    def __init__(self, resource_id: str, cause: Exception):
        super().__init__(f"tag write failed for {resource_id}: {cause}")
        self.resource_id = resource_id
        self.cause = cause
