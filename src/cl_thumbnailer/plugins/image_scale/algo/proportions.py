"""Proportional sizing of a transform job."""

from dataclasses import dataclass, field

from loguru import logger

from ....errors import NotInitialized


@dataclass
class ImageGeometry:
    """Mutable sizing state for one transform job.

    ``width``/``height`` start at the natural size of the loaded source.
    Setting one of them with ``constrain_proportions`` recomputes the other
    from the current aspect ratio. ``crop_x``/``crop_y`` always follow the
    last assigned size and define the target canvas.
    """

    constrain_proportions: bool = True
    natural_width: int | None = field(default=None, init=False)
    natural_height: int | None = field(default=None, init=False)
    _width: int | None = field(default=None, init=False, repr=False)
    _height: int | None = field(default=None, init=False, repr=False)
    crop_x: int | None = field(default=None, init=False)
    crop_y: int | None = field(default=None, init=False)

    @classmethod
    def from_size(
        cls,
        size: tuple[int, int],
        *,
        constrain_proportions: bool = True,
    ) -> "ImageGeometry":
        geometry = cls(constrain_proportions=constrain_proportions)
        geometry.initialize(*size)
        return geometry

    def initialize(self, natural_width: int, natural_height: int) -> None:
        """Record the decoded source size and reset the target to it."""
        if natural_width <= 0 or natural_height <= 0:
            raise ValueError(
                f"Natural dimensions must be positive, got {natural_width}x{natural_height}"
            )

        self.natural_width = natural_width
        self.natural_height = natural_height
        self._width = natural_width
        self._height = natural_height
        self.crop_x = natural_width
        self.crop_y = natural_height

    @property
    def initialized(self) -> bool:
        return self._width is not None and self._height is not None

    def _require_size(self) -> tuple[int, int]:
        if self._width is None or self._height is None:
            raise NotInitialized()
        return self._width, self._height

    @property
    def width(self) -> int:
        return self._require_size()[0]

    @property
    def height(self) -> int:
        return self._require_size()[1]

    @property
    def size(self) -> tuple[int, int]:
        return self._require_size()

    @property
    def canvas_size(self) -> tuple[int, int]:
        self._require_size()
        assert self.crop_x is not None and self.crop_y is not None
        return self.crop_x, self.crop_y

    @property
    def crop_rectangle(self) -> tuple[int, int, int, int]:
        """Target-space rectangle (x, y, width, height) the source is drawn into."""
        crop_x, crop_y = self.canvas_size
        return 0, 0, crop_x, crop_y

    def set_width(self, new_width: int) -> None:
        current_width, current_height = self._require_size()
        width = max(1, new_width)
        height = current_height

        if self.constrain_proportions:
            height = max(1, round(current_height * width / current_width))

        self._width = width
        self._height = height
        self.crop_x = width
        self.crop_y = height
        logger.debug(f"Resized {current_width}x{current_height} -> {width}x{height} (by width)")

    def set_height(self, new_height: int) -> None:
        current_width, current_height = self._require_size()
        height = max(1, new_height)
        width = current_width

        if self.constrain_proportions:
            width = max(1, round(current_width * height / current_height))

        self._width = width
        self._height = height
        self.crop_x = width
        self.crop_y = height
        logger.debug(f"Resized {current_width}x{current_height} -> {width}x{height} (by height)")

    def set_max_proportions(self, max_height: int, max_width: int) -> None:
        """Shrink the image to fit within max_height x max_width, keeping proportions.

        Only the longer side is compared against its limit; the other side
        follows from the aspect ratio.
        """
        self.constrain_proportions = True
        width, height = self._require_size()

        if height > width:
            if height > max_height:
                self.set_height(max_height)
        elif width > max_width:
            self.set_width(max_width)
