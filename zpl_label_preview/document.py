"""
Label document model produced by the parser and consumed by the renderer.
"""

# Standard Library
import dataclasses
import math
import weakref

# local repo modules
import zpl_label_preview as zlp
import zpl_label_preview.config


DEFAULT_FONT_NAME = zlp.config.DEFAULT_FONT_NAME
DEFAULT_FONT_ORIENTATION = zlp.config.DEFAULT_FONT_ORIENTATION
DEFAULT_MODULE_WIDTH = zlp.config.DEFAULT_MODULE_WIDTH
DEFAULT_WIDE_TO_NARROW_RATIO = zlp.config.DEFAULT_WIDE_TO_NARROW_RATIO
DEFAULT_BARCODE_HEIGHT = zlp.config.DEFAULT_BARCODE_HEIGHT
DEFAULT_QR_MAGNIFICATION = zlp.config.DEFAULT_QR_MAGNIFICATION
DEFAULT_DATAMATRIX_MODULE = zlp.config.DEFAULT_DATAMATRIX_MODULE

CODE39 = "code39"
CODE128 = "code128"
EAN13 = "ean13"
INTERLEAVED_2_OF_5 = "interleaved2of5"
QRCODE = "qrcode"
DATAMATRIX = "datamatrix"
SYMBOLOGIES = (CODE39, CODE128, EAN13, INTERLEAVED_2_OF_5, QRCODE, DATAMATRIX)

VARIABLE_TYPES = ("string", "number", "boolean")


@dataclasses.dataclass
class Position:
	x: int = 0
	y: int = 0


@dataclasses.dataclass
class FontSettings:
	font_name: str = DEFAULT_FONT_NAME
	height: int | None = None
	width: int | None = None
	orientation: str = DEFAULT_FONT_ORIENTATION


@dataclasses.dataclass
class TextBlockFormat:
	width: int
	max_lines: int = 1
	line_spacing: int = 0
	justification: str = "L"


@dataclasses.dataclass
class BarcodeDefaults:
	module_width: int = DEFAULT_MODULE_WIDTH
	wide_bar_to_narrow_ratio: float = DEFAULT_WIDE_TO_NARROW_RATIO
	height: int = DEFAULT_BARCODE_HEIGHT


@dataclasses.dataclass
class Code39Options:
	orientation: str = "N"
	mod43_check_digit: bool = False
	# 0 means "use the ^BY height"
	height: int = 0
	print_interpretation_line: bool = True
	interpretation_line_above: bool = False


@dataclasses.dataclass
class Code128Options:
	orientation: str = "N"
	height: int = 0
	print_interpretation_line: bool = True
	interpretation_line_above: bool = False
	ucc_check_digit: bool = False
	mode: str = "A"


@dataclasses.dataclass
class Ean13Options:
	orientation: str = "N"
	height: int = 0
	print_interpretation_line: bool = True
	interpretation_line_above: bool = False


@dataclasses.dataclass
class Interleaved2of5Options:
	orientation: str = "N"
	height: int = 0
	print_interpretation_line: bool = True
	interpretation_line_above: bool = False
	check_digit: bool = False


@dataclasses.dataclass
class QrCodeOptions:
	orientation: str = "N"
	model: int = 2
	magnification: int = DEFAULT_QR_MAGNIFICATION
	error_correction: str = "Q"
	mask: int = 7
	height: int = 0
	print_interpretation_line: bool = False


@dataclasses.dataclass
class DataMatrixOptions:
	orientation: str = "N"
	# element (module) height in dots
	module_height: int = DEFAULT_DATAMATRIX_MODULE
	quality: int = 200
	columns: int = 0
	rows: int = 0
	height: int = 0
	print_interpretation_line: bool = False


BarcodeOptions = (
	Code39Options
	| Code128Options
	| Ean13Options
	| Interleaved2of5Options
	| QrCodeOptions
	| DataMatrixOptions
)


@dataclasses.dataclass
class BarcodeRenderOptions:
	module_width: int
	height: int
	display_value: bool
	wide_bar_width: int


@dataclasses.dataclass
class TextItem:
	x: int
	y: int
	data: str
	font: FontSettings = dataclasses.field(default_factory=FontSettings)
	block_format: TextBlockFormat | None = None
	field_reversed: bool = False
	field_hex: bool = False
	kind: str = dataclasses.field(default="text", init=False)


@dataclasses.dataclass
class GraphicBoxItem:
	x: int
	y: int
	# 0 means the parameter was never given
	width: int = 0
	height: int = 0
	thickness: int = 0
	color: str = "B"
	roundedness: int = 0
	field_reversed: bool = False
	kind: str = dataclasses.field(default="box", init=False)

	def is_visible(self) -> bool:
		return self.width > 0 and self.height > 0


@dataclasses.dataclass
class BarcodeItem:
	x: int
	y: int
	data: str
	symbology: str
	options: BarcodeOptions | None = None
	# ^BY module width in effect when the field was created
	module_width: int | None = None
	label_ref: weakref.ref | None = dataclasses.field(default=None, repr=False, compare=False)
	field_reversed: bool = False
	field_hex: bool = False
	kind: str = dataclasses.field(default="barcode", init=False)

	@property
	def label(self) -> "Label | None":
		"""
		Owning label, if it is still alive.
		"""
		if self.label_ref is None:
			return None
		return self.label_ref()

	def barcode_defaults(self) -> BarcodeDefaults:
		label = self.label
		if label is not None and label.barcode_defaults is not None:
			return label.barcode_defaults
		return BarcodeDefaults()

	def render_options(self) -> BarcodeRenderOptions:
		"""
		Merge field options with the label's ^BY defaults.

		Returns:
			BarcodeRenderOptions with module width, bar height and text flag.
		"""
		defaults = self.barcode_defaults()
		module_width = self.module_width or defaults.module_width
		height = defaults.height
		display_value = True
		if self.options is not None:
			height = self.options.height or defaults.height
			display_value = self.options.print_interpretation_line
		wide_bar_width = math.floor(module_width * defaults.wide_bar_to_narrow_ratio + 0.5)
		return BarcodeRenderOptions(
			module_width=module_width,
			height=height,
			display_value=display_value,
			wide_bar_width=wide_bar_width,
		)

	def processed_data(self) -> str:
		"""
		Payload with symbology specific framing applied.

		Returns:
			Data to hand to the encoder and symbol generator.
		"""
		if self.symbology == CODE39:
			return f"*{self.data}*"
		return self.data

	def orientation(self) -> str:
		if self.options is None:
			return "N"
		return self.options.orientation or "N"


LayoutItem = TextItem | BarcodeItem | GraphicBoxItem


@dataclasses.dataclass
class Label:
	items: list[LayoutItem] = dataclasses.field(default_factory=list)
	home_position: Position = dataclasses.field(default_factory=Position)
	default_font: FontSettings = dataclasses.field(default_factory=FontSettings)
	barcode_defaults: BarcodeDefaults | None = None


@dataclasses.dataclass
class Variable:
	name: str
	type: str = "string"
	# always text; the type is advisory
	value: str = ""


@dataclasses.dataclass
class ParseResult:
	label: Label | None = None
	is_valid: bool = False
	errors: list[str] = dataclasses.field(default_factory=list)
	variables: dict[str, Variable] = dataclasses.field(default_factory=dict)
