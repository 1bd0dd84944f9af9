"""
Business errors raised by the social services; routes map them to HTTP status codes.
"""


class ServiceError(Exception):
    pass


class UserNotFoundError(ServiceError):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class SelfFollowError(ServiceError):
    def __init__(self):
        super().__init__("You cannot follow yourself")


class WatchLogNotFoundError(ServiceError):
    def __init__(self, log_id: str):
        super().__init__(f"Watch log {log_id} not found")
        self.log_id = log_id


class WatchLogPermissionError(ServiceError):
    def __init__(self, log_id: str):
        super().__init__("You can only delete your own watch logs")
        self.log_id = log_id
