import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Pattern

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class Settings:
    """
    Run configuration, built once from the command line and passed down
    explicitly to the walker, the fingerprinter and the upload sink.
    """
    root: Path
    username: str = ""
    password: str = ""
    server: str = ""
    investigation: str = ""
    pattern: Optional[Pattern[str]] = None
    verbose: bool = True
    extra_verbose: bool = False
    limit: int = -1
    dry_run: bool = False
    insecure: bool = False
    progress: bool = False

    @classmethod
    def from_args(cls, args) -> "Settings":
        """Validates parsed arguments. Raises ConfigurationError on the first problem."""
        if not args.test:
            if not args.username:
                raise ConfigurationError("Please provide the username")
            if not args.password:
                raise ConfigurationError("Please provide the password")
            if not args.server:
                raise ConfigurationError("Please provide the Demisto server URL")

        pattern = None
        if args.regex:
            try:
                pattern = re.compile(args.regex)
            except re.error as e:
                raise ConfigurationError(f"Invalid regex - {e}") from e

        root = Path(args.folder)
        if not root.is_dir():
            raise ConfigurationError(f"Folder {root} does not exist or is not a directory")

        return cls(
            root=root,
            username=args.username or "",
            password=args.password or "",
            server=args.server or "",
            investigation=args.investigation or "",
            pattern=pattern,
            verbose=args.verbose,
            extra_verbose=args.extra_verbose,
            limit=args.limit,
            dry_run=args.test,
            insecure=args.insecure,
            progress=args.progress,
        )

    def matches(self, path: Path) -> bool:
        return self.pattern is None or self.pattern.search(str(path)) is not None
