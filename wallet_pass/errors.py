"""
Error taxonomy for pass issuance. Each error knows its HTTP status and JSON envelope;
the app converts them once at the request boundary.
"""


class WalletPassError(Exception):
    status_code = 500

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(WalletPassError):
    """Bad or missing request fields."""

    status_code = 400


class ConfigurationError(WalletPassError):
    """Missing or unusable issuer, class or service-account settings."""

    status_code = 500


class UpstreamAuthError(WalletPassError):
    """Token endpoint rejected the service-account assertion."""

    status_code = 500

    def __init__(self, upstream_status: int, body: str):
        super().__init__("Failed to get Google OAuth token", details=f"{upstream_status} - {body}")
        self.upstream_status = upstream_status
        self.body = body


class UpstreamError(WalletPassError):
    """Wallet API rejected a class/object call. Status and body are passed through verbatim."""

    def __init__(self, message: str, upstream_status: int, body: str):
        super().__init__(message, details=body)
        self.upstream_status = upstream_status
        self.body = body

    @property
    def status_code(self) -> int:
        return self.upstream_status


class SaveTokenError(WalletPassError):
    """Object was created but the save token could not be minted. Carries passId so the caller can resume."""

    status_code = 500

    def __init__(self, pass_id: str, details: str):
        super().__init__("Failed to sign save-to-wallet token", details=details)
        self.pass_id = pass_id

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["passId"] = self.pass_id
        return body
