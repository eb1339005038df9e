from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class MissingTagAndDigestError(Exception):
    pass


class MissingNameAndUrlError(Exception):
    pass


@dataclass(frozen=True)
class Image:
    """The Image Dataclass identifies an image in a registry or in the
    docker daemon's store.

    Either name and tag/digest must be provided or url
    """

    # no registry needed for images in the docker daemon
    registry: Optional[str] = None
    # name can be excluded if url is present
    name: Optional[str] = None
    digest: Optional[str] = None
    tag: Optional[str] = None
    # url is an unparsed reference, used as-is when rendering
    url: Optional[str] = None
    # skopeo transports used here: docker-daemon:, oci:
    transport: str = ""

    def __post_init__(self) -> None:
        # enforce at least one of digest/tag is defined
        # both may be defined
        if self.name:
            if not self.digest and not self.tag:
                raise MissingTagAndDigestError(
                    "Missing tag and digest for Image type with name defined"
                )
        elif not self.url:
            raise MissingNameAndUrlError(
                "Missing name and url for Image type. One must be provided at instantiation"
            )
        object.__setattr__(
            self,
            "registry_path",
            f"{self.registry}/{self.name}" if self.registry else self.name,
        )

    @classmethod
    def from_string(cls, reference: str, transport: str = "") -> "Image":
        """Parse a reference such as ``registry:5000/repo/name:tag`` or
        ``repo/name@sha256:...``.

        The first path component is treated as a registry host when it
        contains a ``.`` or ``:`` or is ``localhost``. References without a
        tag or digest get the ``latest`` tag.
        """
        if not reference:
            raise MissingNameAndUrlError("Cannot parse an empty image reference")
        remainder, _, digest = reference.partition("@")
        registry = None
        first, sep, rest = remainder.partition("/")
        if sep and ("." in first or ":" in first or first == "localhost"):
            registry, remainder = first, rest
        name, tag = remainder, None
        if ":" in remainder:
            name, _, tag = remainder.rpartition(":")
        if not tag and not digest:
            tag = "latest"
        return cls(
            registry=registry,
            name=name,
            tag=tag or None,
            digest=digest or None,
            transport=transport,
        )

    def _get_init_args(self, **kwargs: str) -> dict:
        potential_args = [
            "registry",
            "name",
            "digest",
            "tag",
            "url",
            "transport",
        ]

        init_args = {}

        for arg in potential_args:
            # check if key was passed, using "or" instead of ternary would prevent intentionally setting values to falsey things
            init_args[arg] = kwargs[arg] if arg in kwargs else getattr(self, arg)
        return init_args

    def from_image(self, **kwargs: str) -> "Image":
        # prioritize passed args
        return type(self)(**self._get_init_args(**kwargs))

    def tag_str(self):
        return f"{self.registry_path}:{self.tag}"

    def digest_str(self):
        return f"{self.registry_path}@{self.digest}"

    def __str__(self):
        if self.url:
            return f"{self.transport}{self.url}"
        elif self.tag and self.digest:
            return f"{self.transport}{self.tag_str()}@{self.digest}"
        elif self.tag:
            return f"{self.transport}{self.tag_str()}"
        return f"{self.transport}{self.digest_str()}"


@dataclass
class ImageFile:
    """An image stored on disk, e.g. an OCI layout directory."""

    file_path: Path | str
    transport: str = ""

    def __post_init__(self):
        self.file_path = (
            Path(self.file_path)
            if not isinstance(self.file_path, Path)
            else self.file_path
        )

    def __str__(self):
        return f"{self.transport}{self.file_path.as_posix()}"
