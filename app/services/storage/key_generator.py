from datetime import datetime, timezone
from pathlib import PurePosixPath
from uuid import uuid4

INPUT_PREFIX = "input"
TEMPLATE_PREFIX = "template"


class KeyGenerator:
    @staticmethod
    def _normalize_name(name: str) -> str:
        # Slashes would nest the object under an unintended prefix.
        return name.strip().replace(" ", "_").replace("/", "_").lower()

    @staticmethod
    def _suffix() -> str:
        return uuid4().hex[:8]

    @staticmethod
    def generate_object_key(
        prefix: str, filename: str, custom_name: str | None = None, *, now: datetime | None = None
    ) -> str:
        """Build ``<prefix>/<name>_<suffix><ext>``.

        ``name`` is the normalized custom name, or a UTC timestamp when none is
        given. The random suffix keeps repeated uploads of the same name apart.
        """
        ext = PurePosixPath(filename or "").suffix
        base = KeyGenerator._normalize_name(custom_name) if custom_name else ""
        if not base:
            base = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
        return f"{prefix}/{base}_{KeyGenerator._suffix()}{ext}"

    @staticmethod
    def asset_input_key(filename: str, custom_name: str | None = None) -> str:
        return KeyGenerator.generate_object_key(INPUT_PREFIX, filename, custom_name)

    @staticmethod
    def template_key(filename: str, name: str) -> str:
        return KeyGenerator.generate_object_key(TEMPLATE_PREFIX, filename, name)
