"""
Barcode symbol images.

Linear symbols and Data Matrix come from reportlab's barcode widgets, drawn
into an in-memory PDF and rasterized with PyMuPDF at 72 dpi, so one point of
reportlab geometry is one pixel. QR codes come from the qrcode package.
"""

# Standard Library
import dataclasses
import io
import re

# PIP3 modules
import fitz
import PIL.Image
import qrcode
import qrcode.constants
import reportlab.graphics.barcode
import reportlab.graphics.renderPDF
import reportlab.lib.units

# local repo modules
import zpl_label_preview as zlp
import zpl_label_preview.document


CODE39 = zlp.document.CODE39
CODE128 = zlp.document.CODE128
EAN13 = zlp.document.EAN13
INTERLEAVED_2_OF_5 = zlp.document.INTERLEAVED_2_OF_5
QRCODE = zlp.document.QRCODE
DATAMATRIX = zlp.document.DATAMATRIX

# reportlab widget names
REPORTLAB_CODES = {
	CODE39: "Standard39",
	CODE128: "Code128",
	EAN13: "EAN13",
	INTERLEAVED_2_OF_5: "I2of5",
	DATAMATRIX: "ECC200DataMatrix",
}

QR_ERROR_LEVELS = {
	"L": qrcode.constants.ERROR_CORRECT_L,
	"M": qrcode.constants.ERROR_CORRECT_M,
	"Q": qrcode.constants.ERROR_CORRECT_Q,
	"H": qrcode.constants.ERROR_CORRECT_H,
}

# ^FD of a QR field starts with <error correction><input mode>,
QR_FIELD_PREFIX = re.compile(r"^(?P<level>[HQML])(?P<mode>[AM]),")
EAN13_DIGITS = re.compile(r"^\d{12,13}$")

ROTATIONS = {
	"R": PIL.Image.Transpose.ROTATE_270,
	"I": PIL.Image.Transpose.ROTATE_180,
	"B": PIL.Image.Transpose.ROTATE_90,
}


class BarcodeGenerationError(RuntimeError):
	"""
	Raised when a symbol cannot be produced for the given data.
	"""


@dataclasses.dataclass
class BarcodeImageConfig:
	# narrow bar / module size in pixels
	module_width: float = 2.0
	height_mm: float = 10.0
	show_text: bool = True
	orientation: str = "N"
	check_digit: bool = False
	wide_to_narrow_ratio: float = 3.0
	qr_level: str = "Q"
	qr_magnification: int = 2


#============================================
def rasterize_drawing(drawing) -> PIL.Image.Image:
	"""
	Rasterize a reportlab drawing through an in-memory PDF.

	Args:
		drawing: reportlab Drawing.

	Returns:
		RGB image, one pixel per point.
	"""
	pdf_bytes = reportlab.graphics.renderPDF.drawToString(drawing)
	document = fitz.open(stream=pdf_bytes, filetype="pdf")
	try:
		page = document[0]
		pixmap = page.get_pixmap(dpi=72, alpha=False)
		image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	finally:
		document.close()
	return image


#============================================
def linear_options(symbology: str, data: str, config: BarcodeImageConfig) -> dict:
	"""
	Build reportlab widget options for a linear symbology.

	Args:
		symbology: Symbology constant.
		data: Encoded field data.
		config: Image configuration.

	Returns:
		Keyword options for createBarcodeDrawing.
	"""
	bar_height = config.height_mm * reportlab.lib.units.mm * config.module_width
	options = {
		"value": data,
		"barWidth": config.module_width,
		"barHeight": bar_height,
		"humanReadable": config.show_text,
		"quiet": False,
	}
	if symbology == CODE39:
		# the widget adds its own start/stop characters
		options["value"] = data.strip("*")
		options["checksum"] = config.check_digit
		options["stop"] = True
		options["ratio"] = config.wide_to_narrow_ratio
	elif symbology == INTERLEAVED_2_OF_5:
		options["checksum"] = config.check_digit
		options["bearers"] = 0
		options["ratio"] = config.wide_to_narrow_ratio
	elif symbology == EAN13:
		if not EAN13_DIGITS.match(data):
			raise BarcodeGenerationError("EAN-13 data must be 12 or 13 digits")
		# the check digit is always computed
		options["value"] = data[:12]
	return options


#============================================
def generate_reportlab(symbology: str, data: str, config: BarcodeImageConfig) -> PIL.Image.Image:
	code_name = REPORTLAB_CODES[symbology]
	if symbology == DATAMATRIX:
		options = {"value": data, "barWidth": config.module_width}
	else:
		options = linear_options(symbology, data, config)
	drawing = reportlab.graphics.barcode.createBarcodeDrawing(code_name, **options)
	return rasterize_drawing(drawing)


#============================================
def split_qr_field(data: str, default_level: str) -> tuple[str, str]:
	"""
	Separate the ZPL QR field prefix from the payload.

	Args:
		data: Field data, e.g. "QA,https://example.com".
		default_level: Level used when the prefix is missing.

	Returns:
		Tuple of (error correction level, payload).
	"""
	match = QR_FIELD_PREFIX.match(data)
	if match is None:
		return default_level, data
	return match.group("level"), data[match.end():]


#============================================
def generate_qrcode(data: str, config: BarcodeImageConfig) -> PIL.Image.Image:
	level, payload = split_qr_field(data, config.qr_level)
	qr = qrcode.QRCode(
		error_correction=QR_ERROR_LEVELS[level],
		box_size=max(1, config.qr_magnification),
		border=0,
	)
	qr.add_data(payload)
	qr_img = qr.make_image()
	qr_buffer = io.BytesIO()
	qr_img.save(qr_buffer, kind="PNG")
	qr_buffer.seek(0)
	image = PIL.Image.open(qr_buffer)
	return image.convert("RGB")


#============================================
def generate(symbology: str, data: str, config: BarcodeImageConfig) -> PIL.Image.Image:
	"""
	Produce a symbol image.

	Args:
		symbology: Symbology constant from zpl_label_preview.document.
		data: Field data after printer encoding.
		config: Module size, height and text options.

	Returns:
		RGB image, black symbol on white, rotated to the field orientation.
	"""
	if not data:
		raise BarcodeGenerationError("Barcode data is empty")
	try:
		if symbology == QRCODE:
			image = generate_qrcode(data, config)
		elif symbology in REPORTLAB_CODES:
			image = generate_reportlab(symbology, data, config)
		else:
			raise BarcodeGenerationError(f"Unsupported symbology: {symbology}")
	except BarcodeGenerationError:
		raise
	except Exception as error:
		# reportlab raises bare Exception for oversized Data Matrix payloads
		raise BarcodeGenerationError(f"{symbology}: {error}") from error

	transpose = ROTATIONS.get(config.orientation)
	if transpose is not None:
		image = image.transpose(transpose)
	return image
