"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses


SUPPORTED_DPI = (152, 203, 300, 600)
DEFAULT_DPI = 203
DEFAULT_DIMENSIONS = "4x6"
DEFAULT_ORIENTATION = "portrait"
ORIENTATIONS = ("portrait", "landscape")
DEFAULT_SCALE = 1.0
DEFAULT_FOREGROUND_COLOR = "#000000"
DEFAULT_BACKGROUND_COLOR = "#FFFFFF"
DEFAULT_DEVICE_PIXEL_RATIO = 1.0
FALLBACK_TEXT_COLOR = "#FF0000"

# canvas units per label inch, before device pixel ratio
CANVAS_UNITS_PER_INCH = 100.0

DEFAULT_MAX_TEMPLATE_LENGTH = 4096

MAX_DOTS = 32000
DEFAULT_FONT_NAME = "0"
DEFAULT_FONT_ORIENTATION = "N"
DEFAULT_TEXT_HEIGHT = 20
LINE_HEIGHT_FACTOR = 1.2
PROPORTIONAL_FONT_NAME = "0"
FALLBACK_TEXT_SIZE = 14

DEFAULT_MODULE_WIDTH = 2
DEFAULT_WIDE_TO_NARROW_RATIO = 3.0
DEFAULT_BARCODE_HEIGHT = 10
DEFAULT_BARCODE_RENDER_HEIGHT = 100
# ZPL dots -> barcode library millimetres
BARCODE_HEIGHT_DIVISOR = 15.0
DEFAULT_QR_MAGNIFICATION = 2
DEFAULT_DATAMATRIX_MODULE = 2


@dataclasses.dataclass
class RenderConfig:
	dpi: int = DEFAULT_DPI
	dimensions: str = DEFAULT_DIMENSIONS
	orientation: str = DEFAULT_ORIENTATION
	scale: float = DEFAULT_SCALE
	foreground_color: str = DEFAULT_FOREGROUND_COLOR
	background_color: str = DEFAULT_BACKGROUND_COLOR
	device_pixel_ratio: float = DEFAULT_DEVICE_PIXEL_RATIO

	def __post_init__(self) -> None:
		self.dpi = int(self.dpi)
		if self.dpi not in SUPPORTED_DPI:
			supported = ", ".join(str(value) for value in SUPPORTED_DPI)
			raise ValueError(f"Unsupported DPI {self.dpi}. Supported values: {supported}")
		if self.orientation not in ORIENTATIONS:
			raise ValueError(f"Orientation must be portrait or landscape, got {self.orientation!r}")
		if self.scale <= 0:
			raise ValueError("Scale must be a positive number")
		if self.device_pixel_ratio <= 0:
			raise ValueError("Device pixel ratio must be a positive number")
		# fail early on malformed sizes
		parse_dimensions(self.dimensions)


#============================================
def parse_dimensions(value: str) -> tuple[float, float]:
	"""
	Parse a label size string like "4x6" or "3x1_5" into inches.

	Args:
		value: Size string, width then height, "_" allowed as decimal point.

	Returns:
		Tuple of (width_inches, height_inches).
	"""
	parts = value.strip().lower().split("x")
	if len(parts) != 2:
		raise ValueError(f"Dimensions must look like <W>x<H>, got {value!r}")
	sizes = []
	for part in parts:
		try:
			size = float(part.replace("_", "."))
		except ValueError:
			raise ValueError(f"Dimensions must look like <W>x<H>, got {value!r}") from None
		if size <= 0:
			raise ValueError(f"Dimensions must be positive, got {value!r}")
		sizes.append(size)
	return (sizes[0], sizes[1])


#============================================
def canvas_size(config: RenderConfig) -> tuple[int, int]:
	"""
	Compute the pixel size of the preview canvas.

	Args:
		config: Render configuration.

	Returns:
		Tuple of (width_px, height_px).
	"""
	width_in, height_in = parse_dimensions(config.dimensions)
	if config.orientation == "landscape":
		width_in, height_in = height_in, width_in
	width = int(round(width_in * CANVAS_UNITS_PER_INCH * config.device_pixel_ratio))
	height = int(round(height_in * CANVAS_UNITS_PER_INCH * config.device_pixel_ratio))
	return (width, height)


#============================================
def dots_to_pixels_factor(config: RenderConfig) -> float:
	"""
	Pixels per printer dot, uniform scale included.

	Args:
		config: Render configuration.

	Returns:
		Multiplier applied to every dot coordinate.
	"""
	return config.scale * CANVAS_UNITS_PER_INCH * config.device_pixel_ratio / config.dpi
