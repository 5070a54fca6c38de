import mimetypes
from pathlib import Path

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class LakeFile:
    """An in-memory handle to binary content with a name and a reported content type.

    This is what gets uploaded to the data lake and what downloads return. The
    content is held entirely in memory; the backend does not support chunked
    or resumable transfers.

    Attributes:
        name: The file name, including its extension.
        content: The raw bytes.
        content_type: The reported MIME type, or None when the source did not report one.
    """

    __slots__ = ("name", "content", "content_type")

    def __init__(self, name: str, content: bytes, content_type: str | None = None) -> None:
        self.name = name
        self.content = bytes(content)
        self.content_type = content_type


    def __repr__(self) -> str:
        return f"LakeFile(name={self.name!r}, size={self.size}, content_type={self.content_type!r})"


    @property
    def size(self) -> int:
        """Byte length of the content."""
        return len(self.content)


    @property
    def extension(self) -> str:
        """Substring from the last dot of the name (dot included), or "" when the name has none."""
        idx = self.name.rfind(".")
        return self.name[idx:] if idx != -1 else ""


    @classmethod
    def from_path(cls, path: Path | str) -> "LakeFile":
        """Load a local file. The content type is guessed from the extension."""
        path = Path(path).expanduser().resolve()
        if not path.exists() or not path.is_file():
            raise ValueError(f"Invalid file path: {path}")
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, content=path.read_bytes(), content_type=content_type)


    @classmethod
    def from_bytes(cls, content: bytes | bytearray, name: str, content_type: str | None = None) -> "LakeFile":
        return cls(name=name, content=bytes(content), content_type=content_type)


    def to_disk(self, path: Path | str) -> Path:
        """Save the file to disk. If `path` is a directory the file keeps its own name."""
        path = Path(path).expanduser()
        if path.is_dir():
            path = path / self.name
        path.write_bytes(self.content)
        return path
