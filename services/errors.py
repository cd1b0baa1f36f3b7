'''
----------------------------
Domain errors raised by services
Resources translate them into HTTP responses
----------------------------
'''


class ShowcaseError(Exception):
    # Base class, carries a user-facing message
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class SelfInteractionError(ShowcaseError):
    # Owners cannot rate, like or review their own project
    status_code = 403


class PermissionDeniedError(ShowcaseError):
    status_code = 403


class InviteStateError(ShowcaseError):
    # Invite is not in a state that allows the requested transition
    status_code = 409


class SubmissionError(ShowcaseError):
    # Form or file validation failed before anything was uploaded
    status_code = 400
