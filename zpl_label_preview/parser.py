"""
ZPL parser: turns a command stream into a Label document.

Each supported command is a plain function taking the ParseState owned by
the current parse() call and the command's parameter text. Handlers raise
ValueError for bad parameters; the dispatch loop records the message against
the command and moves on to the next token.
"""

# Standard Library
import dataclasses
import logging
import re
import weakref
from typing import Callable

# local repo modules
import zpl_label_preview as zlp
import zpl_label_preview.catalog
import zpl_label_preview.config
import zpl_label_preview.document
import zpl_label_preview.tokenizer


logger = logging.getLogger(__name__)

Label = zlp.document.Label
TextItem = zlp.document.TextItem
BarcodeItem = zlp.document.BarcodeItem
GraphicBoxItem = zlp.document.GraphicBoxItem
FontSettings = zlp.document.FontSettings
TextBlockFormat = zlp.document.TextBlockFormat
BarcodeDefaults = zlp.document.BarcodeDefaults
BarcodeOptions = zlp.document.BarcodeOptions
Position = zlp.document.Position
ParseResult = zlp.document.ParseResult
Variable = zlp.document.Variable

START_COMMAND = zlp.tokenizer.START_COMMAND
END_COMMAND = zlp.tokenizer.END_COMMAND
MAX_DOTS = zlp.config.MAX_DOTS

ORIENTATIONS = ("N", "R", "I", "B")
CODE128_MODES = ("N", "U", "A", "D")
BLOCK_JUSTIFICATIONS = ("L", "C", "R", "J")
QR_ERROR_CORRECTION = ("H", "Q", "M", "L")
DATAMATRIX_QUALITY = (0, 50, 80, 100, 140, 200)

INTEGER_PATTERN = re.compile(r"\s*([+-]?\d+)")
FLOAT_PATTERN = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+))")
FIELD_DATA_PATTERN = re.compile(r"\^FD([^\^~]*)\^FS")
ALPHANUMERIC_PATTERN = re.compile(r"[a-zA-Z0-9]*")


class CommandNotImplementedError(NotImplementedError):
	"""
	Raised for cataloged commands the preview does not interpret.
	"""


@dataclasses.dataclass
class PendingBarcode:
	symbology: str
	options: BarcodeOptions


@dataclasses.dataclass
class ParseState:
	label: Label
	errors: list[str] = dataclasses.field(default_factory=list)
	# None until the first ^FO; fields then sit at the label home
	cursor: Position | None = None
	font: FontSettings = dataclasses.field(default_factory=FontSettings)
	# ^A font, only for the current field
	field_font: FontSettings | None = None
	block_format: TextBlockFormat | None = None
	field_reversed: bool = False
	field_hex: bool = False
	barcode: PendingBarcode | None = None


#============================================
def parse_int(value: str) -> int | None:
	"""
	Read a leading integer the way printers do, ignoring trailing junk.

	Args:
		value: Parameter text.

	Returns:
		Integer value or None when no digits lead the text.
	"""
	match = INTEGER_PATTERN.match(value)
	if match is None:
		return None
	return int(match.group(1))


#============================================
def parse_float(value: str) -> float | None:
	match = FLOAT_PATTERN.match(value)
	if match is None:
		return None
	return float(match.group(1))


#============================================
def parse_ranged_int(value: str, low: int, high: int, message: str) -> int:
	"""
	Parse an integer parameter that must fall inside a range.

	Args:
		value: Parameter text.
		low: Smallest allowed value.
		high: Largest allowed value.
		message: Error message when the value is missing or out of range.

	Returns:
		Parsed integer.
	"""
	number = parse_int(value)
	if number is None or number < low or number > high:
		raise ValueError(message)
	return number


#============================================
def parse_flag(value: str) -> bool:
	return value.upper() == "Y"


#============================================
def split_params(params: str) -> list[str]:
	return params.split(",")


#============================================
def param_at(params: list[str], index: int) -> str:
	"""
	Return a positional parameter, empty when missing.
	"""
	if index < len(params):
		return params[index]
	return ""


#============================================
def field_origin(state: ParseState) -> Position:
	"""
	Position for the next field: the ^FO cursor, or the label home.
	"""
	if state.cursor is None:
		return dataclasses.replace(state.label.home_position)
	return state.cursor


#============================================
def validate_orientation(value: str) -> str:
	"""
	Validate an N/R/I/B orientation parameter.

	Args:
		value: Orientation letter.

	Returns:
		Upper case orientation.
	"""
	orientation = value.upper()
	if orientation in ORIENTATIONS:
		return orientation
	raise ValueError("Invalid orientation value. Must be N, R, I, or B")


#============================================
def parse_barcode_height(value: str) -> int:
	return parse_ranged_int(value, 1, MAX_DOTS, "Barcode height must be between 1 and 32000 dots")


#============================================
def parse_code39_parameters(params: str) -> zlp.document.Code39Options:
	"""
	Parse ^B3o,e,h,f,g.

	Args:
		params: Parameter text.

	Returns:
		Code39Options.
	"""
	values = split_params(params)
	options = zlp.document.Code39Options()
	if param_at(values, 0):
		options.orientation = validate_orientation(values[0])
	if param_at(values, 1):
		options.mod43_check_digit = parse_flag(values[1])
	if param_at(values, 2):
		options.height = parse_barcode_height(values[2])
	if param_at(values, 3):
		options.print_interpretation_line = parse_flag(values[3])
	if param_at(values, 4):
		options.interpretation_line_above = parse_flag(values[4])
	return options


#============================================
def parse_code128_parameters(params: str) -> zlp.document.Code128Options:
	"""
	Parse ^BCo,h,f,g,e,m.

	Args:
		params: Parameter text.

	Returns:
		Code128Options.
	"""
	values = split_params(params)
	options = zlp.document.Code128Options()
	if param_at(values, 0):
		options.orientation = validate_orientation(values[0])
	if param_at(values, 1):
		options.height = parse_barcode_height(values[1])
	if param_at(values, 2):
		options.print_interpretation_line = parse_flag(values[2])
	if param_at(values, 3):
		options.interpretation_line_above = parse_flag(values[3])
	if param_at(values, 4):
		options.ucc_check_digit = parse_flag(values[4])
	if param_at(values, 5):
		mode = values[5].upper()
		if mode not in CODE128_MODES:
			raise ValueError("Invalid Code 128 mode. Must be N, U, A, or D")
		options.mode = mode
	return options


#============================================
def parse_ean13_parameters(params: str) -> zlp.document.Ean13Options:
	values = split_params(params)
	options = zlp.document.Ean13Options()
	if param_at(values, 0):
		options.orientation = validate_orientation(values[0])
	if param_at(values, 1):
		options.height = parse_barcode_height(values[1])
	if param_at(values, 2):
		options.print_interpretation_line = parse_flag(values[2])
	if param_at(values, 3):
		options.interpretation_line_above = parse_flag(values[3])
	return options


#============================================
def parse_interleaved_parameters(params: str) -> zlp.document.Interleaved2of5Options:
	values = split_params(params)
	options = zlp.document.Interleaved2of5Options()
	if param_at(values, 0):
		options.orientation = validate_orientation(values[0])
	if param_at(values, 1):
		options.height = parse_barcode_height(values[1])
	if param_at(values, 2):
		options.print_interpretation_line = parse_flag(values[2])
	if param_at(values, 3):
		options.interpretation_line_above = parse_flag(values[3])
	if param_at(values, 4):
		options.check_digit = parse_flag(values[4])
	return options


#============================================
def parse_qrcode_parameters(params: str) -> zlp.document.QrCodeOptions:
	"""
	Parse ^BQa,b,c,d,e.

	Args:
		params: Parameter text.

	Returns:
		QrCodeOptions.
	"""
	values = split_params(params)
	options = zlp.document.QrCodeOptions()
	if param_at(values, 0):
		options.orientation = validate_orientation(values[0])
	if param_at(values, 1):
		options.model = parse_ranged_int(values[1], 1, 2, "QR model must be 1 or 2")
	if param_at(values, 2):
		options.magnification = parse_ranged_int(
			values[2], 1, 10, "Magnification must be between 1 and 10"
		)
	if param_at(values, 3):
		level = values[3].upper()
		if level not in QR_ERROR_CORRECTION:
			raise ValueError("Error correction must be H, Q, M, or L")
		options.error_correction = level
	if param_at(values, 4):
		options.mask = parse_ranged_int(values[4], 0, 7, "Mask must be between 0 and 7")
	return options


#============================================
def parse_datamatrix_parameters(params: str) -> zlp.document.DataMatrixOptions:
	"""
	Parse ^BXo,h,s,c,r.

	Args:
		params: Parameter text.

	Returns:
		DataMatrixOptions.
	"""
	values = split_params(params)
	options = zlp.document.DataMatrixOptions()
	if param_at(values, 0):
		options.orientation = validate_orientation(values[0])
	if param_at(values, 1):
		options.module_height = parse_ranged_int(
			values[1], 1, MAX_DOTS, "Element height must be between 1 and 32000 dots"
		)
	if param_at(values, 2):
		quality = parse_int(values[2])
		if quality not in DATAMATRIX_QUALITY:
			raise ValueError("Quality level must be 0, 50, 80, 100, 140, or 200")
		options.quality = quality
	if param_at(values, 3):
		options.columns = parse_ranged_int(values[3], 9, 144, "Columns must be between 9 and 144")
	if param_at(values, 4):
		options.rows = parse_ranged_int(values[4], 9, 144, "Rows must be between 9 and 144")
	return options


#============================================
def parse_by_parameters(params: str) -> BarcodeDefaults:
	"""
	Parse ^BYw,r,h.

	Args:
		params: Parameter text.

	Returns:
		BarcodeDefaults.
	"""
	values = split_params(params)
	defaults = BarcodeDefaults()
	if param_at(values, 0):
		defaults.module_width = parse_ranged_int(
			values[0], 1, 10, "Module width must be between 1 and 10 dots"
		)
	if param_at(values, 1):
		ratio = parse_float(values[1])
		if ratio is None or ratio < 2.0 or ratio > 3.0:
			raise ValueError("Wide bar to narrow bar ratio must be between 2.0 and 3.0")
		defaults.wide_bar_to_narrow_ratio = ratio
	if param_at(values, 2):
		height = parse_int(values[2])
		if height is None or height <= 0:
			raise ValueError("Height must be greater than 0")
		defaults.height = height
	return defaults


#============================================
def handle_not_implemented(state: ParseState, params: str) -> None:
	raise CommandNotImplementedError("Command not implemented")


#============================================
def handle_no_op(state: ParseState, params: str) -> None:
	return None


#============================================
def handle_font(state: ParseState, params: str) -> None:
	"""
	^Afo,h,w: font for the current field only.
	"""
	values = split_params(params)
	head = param_at(values, 0)
	if not head:
		raise ValueError("^A command requires a font name")
	font = FontSettings(font_name=head[0], orientation=state.font.orientation)
	if len(head) > 1:
		font.orientation = validate_orientation(head[1])
	if param_at(values, 1):
		font.height = parse_ranged_int(values[1], 1, MAX_DOTS, "Font height must be between 1 and 32000 dots")
	if param_at(values, 2):
		font.width = parse_ranged_int(values[2], 1, MAX_DOTS, "Font width must be between 1 and 32000 dots")
	state.field_font = font


#============================================
def handle_b2(state: ParseState, params: str) -> None:
	options = parse_interleaved_parameters(params)
	state.barcode = PendingBarcode(zlp.document.INTERLEAVED_2_OF_5, options)


#============================================
def handle_b3(state: ParseState, params: str) -> None:
	options = parse_code39_parameters(params)
	state.barcode = PendingBarcode(zlp.document.CODE39, options)


#============================================
def handle_bc(state: ParseState, params: str) -> None:
	options = parse_code128_parameters(params)
	state.barcode = PendingBarcode(zlp.document.CODE128, options)


#============================================
def handle_be(state: ParseState, params: str) -> None:
	options = parse_ean13_parameters(params)
	state.barcode = PendingBarcode(zlp.document.EAN13, options)


#============================================
def handle_bq(state: ParseState, params: str) -> None:
	options = parse_qrcode_parameters(params)
	state.barcode = PendingBarcode(zlp.document.QRCODE, options)


#============================================
def handle_bx(state: ParseState, params: str) -> None:
	options = parse_datamatrix_parameters(params)
	state.barcode = PendingBarcode(zlp.document.DATAMATRIX, options)


#============================================
def handle_by(state: ParseState, params: str) -> None:
	state.label.barcode_defaults = parse_by_parameters(params)


#============================================
def handle_cf(state: ParseState, params: str) -> None:
	"""
	^CFf,h,w: change the default font for following fields.
	"""
	values = split_params(params)
	font_name = param_at(values, 0) or state.font.font_name
	height = None
	width = None
	if len(values) > 1:
		height = parse_int(values[1])
	if len(values) > 2:
		width = parse_int(values[2])
	state.font = FontSettings(
		font_name=font_name,
		height=height,
		width=width,
		orientation=state.font.orientation,
	)


#============================================
def handle_fb(state: ParseState, params: str) -> None:
	"""
	^FBa,b,c,d,e: wrap the current field in a text block.
	"""
	values = split_params(params)
	block = TextBlockFormat(width=0)
	if param_at(values, 0):
		block.width = parse_ranged_int(values[0], 0, 9999, "Block width must be between 0 and 9999 dots")
	if param_at(values, 1):
		block.max_lines = parse_ranged_int(values[1], 1, 9999, "Maximum lines must be between 1 and 9999")
	if param_at(values, 2):
		block.line_spacing = parse_ranged_int(
			values[2], -9999, 9999, "Line spacing must be between -9999 and 9999 dots"
		)
	if param_at(values, 3):
		justification = values[3].upper()
		if justification not in BLOCK_JUSTIFICATIONS:
			raise ValueError("Justification must be L, C, R, or J")
		block.justification = justification
	state.block_format = block


#============================================
def handle_fd(state: ParseState, params: str) -> None:
	"""
	^FD: emit the pending barcode or a text item at the cursor.
	"""
	data = params
	origin = field_origin(state)
	label = state.label
	if state.barcode is not None:
		module_width = None
		if label.barcode_defaults is not None:
			module_width = label.barcode_defaults.module_width
		item = BarcodeItem(
			x=origin.x,
			y=origin.y,
			data=data,
			symbology=state.barcode.symbology,
			options=state.barcode.options,
			module_width=module_width,
			label_ref=weakref.ref(label),
			field_reversed=state.field_reversed,
			field_hex=state.field_hex,
		)
		state.barcode = None
	else:
		font = state.field_font or state.font
		if state.block_format is not None:
			# \& is the block line break
			data = data.replace("\\&", "\n")
		item = TextItem(
			x=origin.x,
			y=origin.y,
			data=data,
			font=dataclasses.replace(font),
			block_format=state.block_format,
			field_reversed=state.field_reversed,
			field_hex=state.field_hex,
		)
	label.items.append(item)
	state.field_reversed = False
	state.field_hex = False


#============================================
def handle_fh(state: ParseState, params: str) -> None:
	state.field_hex = True


#============================================
def handle_fo(state: ParseState, params: str) -> None:
	"""
	^FOx,y: move the cursor relative to the label home.
	"""
	values = split_params(params)
	if len(values) < 2:
		return
	x = parse_int(values[0])
	y = parse_int(values[1])
	if x is None or y is None:
		raise ValueError("^FO coordinates must be numbers")
	home = state.label.home_position
	state.cursor = Position(home.x + x, home.y + y)


#============================================
def handle_fr(state: ParseState, params: str) -> None:
	state.field_reversed = True


#============================================
def handle_fs(state: ParseState, params: str) -> None:
	state.field_font = None
	state.block_format = None


#============================================
def handle_gb(state: ParseState, params: str) -> None:
	"""
	^GBw,h,t,c,r: graphic box at the cursor.
	"""
	values = split_params(params)
	origin = field_origin(state)
	box = GraphicBoxItem(x=origin.x, y=origin.y)
	if param_at(values, 0):
		box.width = parse_ranged_int(values[0], 1, MAX_DOTS, "Box width must be between 1 and 32000 dots")
	if param_at(values, 1):
		box.height = parse_ranged_int(values[1], 1, MAX_DOTS, "Box height must be between 1 and 32000 dots")
	if param_at(values, 2):
		box.thickness = parse_ranged_int(
			values[2], 1, MAX_DOTS, "Border thickness must be between 1 and 32000 dots"
		)
	if param_at(values, 3):
		color = values[3].upper()
		if color not in ("B", "W"):
			raise ValueError("Color must be B or W")
		box.color = color
	if param_at(values, 4):
		box.roundedness = parse_ranged_int(values[4], 0, 8, "Roundedness must be between 0 and 8")
	if state.field_reversed:
		box.field_reversed = True
		state.field_reversed = False
	state.label.items.append(box)


#============================================
def handle_lh(state: ParseState, params: str) -> None:
	"""
	^LHx,y: move the label home for items placed afterwards.
	"""
	values = split_params(params)
	if len(values) < 2:
		raise ValueError("^LH command requires both x and y coordinates")
	x = parse_int(values[0])
	y = parse_int(values[1])
	if x is None or y is None or x < 0 or x > MAX_DOTS or y < 0 or y > MAX_DOTS:
		raise ValueError("^LH coordinates must be between 0 and 32000")
	state.label.home_position = Position(x, y)


CommandHandler = Callable[[ParseState, str], None]

COMMAND_HANDLERS: dict[str, CommandHandler] = {
	"^A": handle_font,
	"^B2": handle_b2,
	"^B3": handle_b3,
	"^BC": handle_bc,
	"^BE": handle_be,
	"^BQ": handle_bq,
	"^BX": handle_bx,
	"^BY": handle_by,
	"^CF": handle_cf,
	"^FB": handle_fb,
	"^FD": handle_fd,
	"^FH": handle_fh,
	"^FO": handle_fo,
	"^FR": handle_fr,
	"^FS": handle_fs,
	"^FX": handle_no_op,
	"^GB": handle_gb,
	"^LH": handle_lh,
}


#============================================
def dispatch(state: ParseState, token: zlp.tokenizer.Token) -> None:
	"""
	Run one token against the parse state, recording failures.

	Args:
		state: State of the running parse.
		token: Token to apply.
	"""
	if not zlp.catalog.has(token.command):
		state.errors.append(f"Invalid command: {token.command}")
		return
	handler = COMMAND_HANDLERS.get(token.command, handle_not_implemented)
	try:
		handler(state, token.params)
	except (ValueError, NotImplementedError) as error:
		state.errors.append(f"Error processing command {token.command}: {error}")


#============================================
def is_alphanumeric(value: str) -> bool:
	return ALPHANUMERIC_PATTERN.fullmatch(value) is not None


#============================================
def replace_in_payload(payload: str, name: str, value: str) -> str:
	"""
	Replace a variable name inside one ^FD payload.

	An occurrence only counts when everything between ^FD and the name, and
	between the name and ^FS, is ASCII letters or digits.

	Args:
		payload: Field data between ^FD and ^FS.
		name: Variable name.
		value: Replacement text.

	Returns:
		Payload with matching occurrences replaced.
	"""
	pieces: list[str] = []
	copied_to = 0
	search_from = 0
	while True:
		found = payload.find(name, search_from)
		if found < 0:
			break
		end = found + len(name)
		if is_alphanumeric(payload[:found]) and is_alphanumeric(payload[end:]):
			pieces.append(payload[copied_to:found])
			pieces.append(value)
			copied_to = end
			search_from = end
		else:
			search_from = found + 1
	pieces.append(payload[copied_to:])
	return "".join(pieces)


#============================================
def substitute_variables(zpl: str, variables: dict[str, Variable]) -> str:
	"""
	Replace variable names inside field data with their values.

	Args:
		zpl: Complete command stream.
		variables: Variables by name; unset (empty) values are left alone.

	Returns:
		Command stream with substitutions applied.
	"""
	working = zpl
	for variable in variables.values():
		if not variable.name or not variable.value:
			continue

		def replace_field(match: re.Match, variable: Variable = variable) -> str:
			payload = replace_in_payload(match.group(1), variable.name, variable.value)
			return f"^FD{payload}^FS"

		working = FIELD_DATA_PATTERN.sub(replace_field, working)
	return working


class ZplParser:
	"""
	Parse one ZPL command stream into a Label.
	"""

	def __init__(
		self,
		zpl: str,
		name: str = "Label",
		variables: dict[str, Variable] | None = None,
	) -> None:
		self.source = zlp.tokenizer.normalize_input(zpl)
		self.name = name
		self.variables: dict[str, Variable] = variables if variables is not None else {}
		self.body = ""
		self.result = ParseResult(variables=self.variables)

	def parse(self) -> ParseResult:
		"""
		Parse the command stream.

		Returns:
			ParseResult with the label, validity flag and ordered errors.
		"""
		self.result = ParseResult(variables=self.variables)
		if not self.source.startswith(START_COMMAND):
			self.result.errors.append("Missing ^XA start command")
			return self.result
		if not self.source.endswith(END_COMMAND):
			self.result.errors.append("Missing ^XZ end command")
			return self.result

		self.body = self.source[len(START_COMMAND):len(self.source) - len(END_COMMAND)]
		state = ParseState(label=Label(), errors=self.result.errors)
		state.font = dataclasses.replace(state.label.default_font)
		for token in zlp.tokenizer.tokenize(self.body):
			logger.debug("Parsing command %s %r", token.command, token.params)
			dispatch(state, token)

		if not state.label.items:
			self.result.errors.append("Label contains no printable items")
			return self.result

		self.result.label = state.label
		self.result.is_valid = not self.result.errors
		return self.result

	def produce(self) -> str:
		"""
		Rebuild the command stream with variable values filled in.

		Returns:
			ZPL text wrapped in ^XA/^XZ.
		"""
		if not self.result.is_valid:
			raise ValueError("Label is not valid")
		working = f"{START_COMMAND}{self.body}{END_COMMAND}"
		return substitute_variables(working, self.variables)
