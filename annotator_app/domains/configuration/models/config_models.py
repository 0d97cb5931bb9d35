"""
Configuration Domain - Configuration Data Models

Data models for application configuration management and validation.
"""
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

STORAGE_BACKENDS = ("local", "s3")
USER_ROLES = ("user", "admin")


@dataclass
class StorageConfiguration:
    """Which annotation store backend to use and where it keeps its documents"""
    backend: str = "local"
    data_file: str = "data/annotator.json"
    s3_bucket: str = ""
    s3_prefix: str = "data"
    aws_region: Optional[str] = None
    s3_endpoint_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "data_file": self.data_file,
            "s3_bucket": self.s3_bucket,
            "s3_prefix": self.s3_prefix,
            "aws_region": self.aws_region,
            "s3_endpoint_url": self.s3_endpoint_url
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageConfiguration':
        """Create storage configuration from dictionary"""
        return cls(
            backend=str(data.get("backend", "local")).lower(),
            data_file=data.get("data_file", "data/annotator.json"),
            s3_bucket=data.get("s3_bucket", ""),
            s3_prefix=data.get("s3_prefix", "data"),
            aws_region=data.get("aws_region"),
            s3_endpoint_url=data.get("s3_endpoint_url")
        )


@dataclass
class AssetConfiguration:
    """Screenshot image storage settings"""
    local_dir: str = "data/assets"
    public_prefix: str = "/assets"
    max_upload_bytes: int = 10 * 1024 * 1024
    upload_grant_expiry_seconds: int = 3600

    def to_dict(self) -> Dict[str, Any]:
        return {
            "local_dir": self.local_dir,
            "public_prefix": self.public_prefix,
            "max_upload_bytes": self.max_upload_bytes,
            "upload_grant_expiry_seconds": self.upload_grant_expiry_seconds
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AssetConfiguration':
        return cls(
            local_dir=data.get("local_dir", "data/assets"),
            public_prefix=data.get("public_prefix", "/assets"),
            max_upload_bytes=int(data.get("max_upload_bytes", 10 * 1024 * 1024)),
            upload_grant_expiry_seconds=int(data.get("upload_grant_expiry_seconds", 3600))
        )


@dataclass
class UserAccount:
    """Login entry; passwords are compared as configured"""
    username: str
    password: str
    role: str = "user"

    @classmethod
    def from_dict(cls, username: str, data: Dict[str, Any]) -> 'UserAccount':
        return cls(
            username=username,
            password=str(data.get("password", "")),
            role=data.get("role", "user")
        )


@dataclass
class AuthConfiguration:
    users: Dict[str, UserAccount] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        # Passwords never leave the process
        return {"users": {name: {"role": account.role} for name, account in self.users.items()}}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuthConfiguration':
        users = {
            name: UserAccount.from_dict(name, entry)
            for name, entry in (data.get("users") or {}).items()
        }
        return cls(users=users)

    @classmethod
    def create_default(cls) -> 'AuthConfiguration':
        return cls(users={
            "user": UserAccount(username="user", password="user", role="user"),
            "admin": UserAccount(username="admin", password="admin", role="admin")
        })


@dataclass
class ServerConfiguration:
    """Uvicorn and CORS settings"""
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "log_level": self.log_level,
            "cors_origins": list(self.cors_origins)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServerConfiguration':
        return cls(
            host=data.get("host", "0.0.0.0"),
            port=int(data.get("port", 8000)),
            log_level=str(data.get("log_level", "INFO")).upper(),
            cors_origins=list(data.get("cors_origins", ["*"]))
        )


@dataclass
class ApplicationConfiguration:
    """Main application configuration container"""
    storage: StorageConfiguration = field(default_factory=StorageConfiguration)
    assets: AssetConfiguration = field(default_factory=AssetConfiguration)
    auth: AuthConfiguration = field(default_factory=AuthConfiguration.create_default)
    server: ServerConfiguration = field(default_factory=ServerConfiguration)

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if self.storage.backend not in STORAGE_BACKENDS:
            errors.append(f"Storage backend must be one of {', '.join(STORAGE_BACKENDS)}, got '{self.storage.backend}'")

        if self.storage.backend == "s3" and not self.storage.s3_bucket:
            errors.append("S3 backend requires s3_bucket")

        if self.storage.backend == "local" and not self.storage.data_file:
            errors.append("Local backend requires data_file")

        if self.assets.max_upload_bytes <= 0:
            errors.append("max_upload_bytes must be positive")

        if self.assets.upload_grant_expiry_seconds <= 0:
            errors.append("upload_grant_expiry_seconds must be positive")

        for name, account in self.auth.users.items():
            if account.role not in USER_ROLES:
                errors.append(f"User '{name}' has unknown role '{account.role}'")

        if self.server.port < 1 or self.server.port > 65535:
            errors.append("Server port must be between 1 and 65535")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "storage": self.storage.to_dict(),
            "assets": self.assets.to_dict(),
            "auth": self.auth.to_dict(),
            "server": self.server.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfiguration':
        """Sections missing from ``data`` keep their defaults"""
        auth_data = data.get("auth")
        return cls(
            storage=StorageConfiguration.from_dict(data.get("storage") or {}),
            assets=AssetConfiguration.from_dict(data.get("assets") or {}),
            auth=AuthConfiguration.from_dict(auth_data) if auth_data else AuthConfiguration.create_default(),
            server=ServerConfiguration.from_dict(data.get("server") or {})
        )

    @classmethod
    def create_default(cls) -> 'ApplicationConfiguration':
        """Create default application configuration"""
        return cls()
