"""
Raster preview of a parsed label, plus PNG and PDF export.
"""

# Standard Library
import functools
import logging
import math
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageColor
import PIL.ImageDraw
import PIL.ImageFont
import PIL.ImageOps
import reportlab
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import zpl_label_preview as zlp
import zpl_label_preview.barcodes
import zpl_label_preview.config
import zpl_label_preview.document
import zpl_label_preview.encoding


logger = logging.getLogger(__name__)

RenderConfig = zlp.config.RenderConfig
Label = zlp.document.Label
TextItem = zlp.document.TextItem
BarcodeItem = zlp.document.BarcodeItem
GraphicBoxItem = zlp.document.GraphicBoxItem

DEFAULT_TEXT_HEIGHT = zlp.config.DEFAULT_TEXT_HEIGHT
LINE_HEIGHT_FACTOR = zlp.config.LINE_HEIGHT_FACTOR
PROPORTIONAL_FONT_NAME = zlp.config.PROPORTIONAL_FONT_NAME
FALLBACK_TEXT_SIZE = zlp.config.FALLBACK_TEXT_SIZE
FALLBACK_TEXT_COLOR = zlp.config.FALLBACK_TEXT_COLOR
DEFAULT_MODULE_WIDTH = zlp.config.DEFAULT_MODULE_WIDTH
DEFAULT_BARCODE_RENDER_HEIGHT = zlp.config.DEFAULT_BARCODE_RENDER_HEIGHT
BARCODE_HEIGHT_DIVISOR = zlp.config.BARCODE_HEIGHT_DIVISOR
ROTATIONS = zlp.barcodes.ROTATIONS

# fonts shipped inside the reportlab distribution
REPORTLAB_FONT_DIR = pathlib.Path(reportlab.__file__).resolve().parent / "fonts"
PROPORTIONAL_FONT_PATH = REPORTLAB_FONT_DIR / "VeraBd.ttf"
FIXED_FONT_PATH = REPORTLAB_FONT_DIR / "com_____.pfb"

PROPORTIONAL_DASH = " – "


#============================================
@functools.lru_cache(maxsize=64)
def load_font(font_name: str, size: int) -> PIL.ImageFont.FreeTypeFont:
	"""
	Load the face used for a ZPL font name.

	Args:
		font_name: ZPL font letter; "0" is the proportional bold face.
		size: Pixel size.

	Returns:
		PIL font.
	"""
	path = FIXED_FONT_PATH
	if font_name == PROPORTIONAL_FONT_NAME:
		path = PROPORTIONAL_FONT_PATH
	try:
		return PIL.ImageFont.truetype(str(path), size)
	except OSError:
		logger.warning("Font %s not loadable, using PIL default", path)
		return PIL.ImageFont.load_default(size)


#============================================
def compute_align_offset(available: float, used: float, justification: str) -> float:
	"""
	Horizontal offset of a line inside a text block.

	Args:
		available: Block width.
		used: Line width.
		justification: L, C, R or J (J lays out like L).

	Returns:
		Offset in pixels.
	"""
	if justification == "R":
		return max(0.0, available - used)
	if justification == "C":
		return max(0.0, (available - used) / 2.0)
	return 0.0


#============================================
def composite(
	image: PIL.Image.Image,
	mask: PIL.Image.Image,
	fill: tuple[int, int, int],
	reverse: bool,
) -> None:
	"""
	Apply a coverage mask to the canvas.

	Args:
		image: RGB canvas, changed in place.
		mask: "L" mask the size of the canvas.
		fill: Colour painted where the mask is set.
		reverse: Invert the canvas under the mask instead of painting.
	"""
	if reverse:
		image.paste(PIL.ImageOps.invert(image), (0, 0), mask)
		return
	image.paste(fill, (0, 0, image.width, image.height), mask)


#============================================
def build_text_mask(
	lines: list[str],
	font: PIL.ImageFont.FreeTypeFont,
	line_height: float,
	block_width: int,
	justification: str,
) -> PIL.Image.Image:
	"""
	Draw text lines into a mask sized to the text.

	Lines wider than a non-zero block width are squeezed to fit.

	Args:
		lines: Lines to draw.
		font: PIL font.
		line_height: Distance between line tops in pixels.
		block_width: Block width in pixels, 0 for free text.
		justification: Block justification.

	Returns:
		"L" mask.
	"""
	widths = [font.getlength(line) for line in lines]
	ascent, descent = font.getmetrics()
	glyph_height = max(1, ascent + descent)
	mask_width = block_width if block_width > 0 else max(widths, default=0)
	mask_width = max(1, math.ceil(mask_width))
	mask_height = max(1, math.ceil(line_height * (len(lines) - 1) + glyph_height))
	mask = PIL.Image.new("L", (mask_width, mask_height), 0)
	draw = PIL.ImageDraw.Draw(mask)
	for index, line in enumerate(lines):
		top = int(round(index * line_height))
		if block_width > 0 and widths[index] > block_width:
			line_mask = PIL.Image.new("L", (math.ceil(widths[index]), glyph_height), 0)
			PIL.ImageDraw.Draw(line_mask).text((0, 0), line, fill=255, font=font)
			squeezed = line_mask.resize((block_width, glyph_height), PIL.Image.Resampling.BILINEAR)
			mask.paste(squeezed, (0, top))
			continue
		offset = 0.0
		if block_width > 0:
			offset = compute_align_offset(block_width, widths[index], justification)
		draw.text((offset, top), line, fill=255, font=font)
	return mask


class ZplRenderer:
	"""
	Paint label items onto a PIL canvas.
	"""

	def __init__(self, config: RenderConfig | None = None) -> None:
		self.config = config or RenderConfig()
		self.factor = zlp.config.dots_to_pixels_factor(self.config)
		self.foreground = PIL.ImageColor.getrgb(self.config.foreground_color)
		self.background = PIL.ImageColor.getrgb(self.config.background_color)

	def scale_value(self, value: float) -> float:
		return value * self.factor

	def scale_point(self, x: int, y: int) -> tuple[int, int]:
		return (int(round(self.scale_value(x))), int(round(self.scale_value(y))))

	def new_canvas(self) -> PIL.Image.Image:
		size = zlp.config.canvas_size(self.config)
		return PIL.Image.new("RGB", size, self.background)

	def render(self, label: Label) -> PIL.Image.Image:
		"""
		Render all items of a label in order.

		Args:
			label: Parsed label.

		Returns:
			RGB image of the label.
		"""
		image = self.new_canvas()
		for item in label.items:
			logger.debug("Rendering %s item at %d,%d", item.kind, item.x, item.y)
			try:
				if isinstance(item, TextItem):
					self.draw_text(image, item)
				elif isinstance(item, GraphicBoxItem):
					self.draw_box(image, item)
				elif isinstance(item, BarcodeItem):
					self.draw_barcode(image, item, label)
			except OSError:
				logger.exception("Failed to render %s item at %d,%d", item.kind, item.x, item.y)
		return image

	def draw_text(self, image: PIL.Image.Image, item: TextItem) -> None:
		"""
		Draw a text field, honouring block format and font orientation.
		"""
		try:
			data = zlp.encoding.encode(item.data, item.field_hex)
		except zlp.encoding.ZplEncodeError as error:
			logger.warning("Failed to encode text %r: %s", item.data, error)
			x, y = self.scale_point(item.x, item.y)
			self.draw_fallback_text(image, x, y, f"Invalid text: {item.data}")
			return
		font_px = max(1, int(round(self.scale_value(item.font.height or DEFAULT_TEXT_HEIGHT))))
		if item.font.font_name == PROPORTIONAL_FONT_NAME:
			data = data.replace("-", PROPORTIONAL_DASH)
		font = load_font(item.font.font_name, font_px)

		block = item.block_format
		if block is not None:
			lines = data.split("\n")[:block.max_lines]
			line_height = font_px * LINE_HEIGHT_FACTOR + self.scale_value(block.line_spacing)
			block_width = int(round(self.scale_value(block.width)))
			justification = block.justification
		else:
			lines = [data]
			line_height = font_px * LINE_HEIGHT_FACTOR
			block_width = 0
			justification = "L"

		text_mask = build_text_mask(lines, font, line_height, block_width, justification)
		transpose = ROTATIONS.get(item.font.orientation)
		if transpose is not None:
			text_mask = text_mask.transpose(transpose)

		mask = PIL.Image.new("L", image.size, 0)
		x, y = self.scale_point(item.x, item.y)
		mask.paste(255, (x, y, x + text_mask.width, y + text_mask.height), text_mask)
		composite(image, mask, self.foreground, item.field_reversed)

	def draw_box(self, image: PIL.Image.Image, item: GraphicBoxItem) -> None:
		"""
		Draw a graphic box, solid when the border fills it.
		"""
		if not item.is_visible():
			return
		x, y = self.scale_point(item.x, item.y)
		width = max(1, int(round(self.scale_value(item.width))))
		height = max(1, int(round(self.scale_value(item.height))))
		# an unset border still draws a hairline
		thickness = max(1, int(round(self.scale_value(item.thickness or 1))))
		radius = 0
		if item.roundedness > 0:
			radius = int(round((item.roundedness / 8.0) * (min(width, height) / 2.0)))

		mask = PIL.Image.new("L", image.size, 0)
		draw = PIL.ImageDraw.Draw(mask)
		rect = [x, y, x + width - 1, y + height - 1]
		solid = item.thickness == item.width and item.thickness == item.height
		if item.field_reversed or solid:
			draw.rounded_rectangle(rect, radius=radius, fill=255)
		else:
			draw.rounded_rectangle(rect, radius=radius, outline=255, width=thickness)

		fill = self.foreground if item.color == "B" else self.background
		composite(image, mask, fill, item.field_reversed)

	def barcode_image_config(self, item: BarcodeItem, label: Label) -> zlp.barcodes.BarcodeImageConfig:
		"""
		Resolve module size, height and symbology flags for one barcode.

		Args:
			item: Barcode item.
			label: Owning label, for ^BY defaults.

		Returns:
			BarcodeImageConfig in printer dots.
		"""
		defaults = label.barcode_defaults
		module_width = item.module_width
		if not module_width and defaults is not None:
			module_width = defaults.module_width
		module_width = module_width or DEFAULT_MODULE_WIDTH

		height = item.options.height if item.options is not None else 0
		if not height and defaults is not None:
			height = defaults.height
		height = height or DEFAULT_BARCODE_RENDER_HEIGHT

		render_options = item.render_options()
		config = zlp.barcodes.BarcodeImageConfig(
			module_width=module_width,
			height_mm=height / BARCODE_HEIGHT_DIVISOR,
			show_text=render_options.display_value,
			orientation=item.orientation(),
			wide_to_narrow_ratio=item.barcode_defaults().wide_bar_to_narrow_ratio,
		)
		options = item.options
		if isinstance(options, zlp.document.Code39Options):
			config.check_digit = options.mod43_check_digit
		elif isinstance(options, zlp.document.Interleaved2of5Options):
			config.check_digit = options.check_digit
		elif isinstance(options, zlp.document.QrCodeOptions):
			config.qr_level = options.error_correction
			config.qr_magnification = options.magnification
		elif isinstance(options, zlp.document.DataMatrixOptions):
			config.module_width = options.module_height
		return config

	def draw_barcode(self, image: PIL.Image.Image, item: BarcodeItem, label: Label) -> None:
		"""
		Draw a barcode, or a red fallback line when it cannot be generated.
		"""
		data = item.processed_data()
		x, y = self.scale_point(item.x, item.y)
		config = self.barcode_image_config(item, label)
		try:
			data = zlp.encoding.encode(data, item.field_hex)
			symbol = zlp.barcodes.generate(item.symbology, data, config)
		except (zlp.encoding.ZplEncodeError, zlp.barcodes.BarcodeGenerationError) as error:
			logger.warning("Failed to render barcode %r: %s", data, error)
			self.draw_fallback_text(image, x, y, f"Invalid barcode: {data}")
			return

		size = (
			max(1, int(round(symbol.width * self.factor))),
			max(1, int(round(symbol.height * self.factor))),
		)
		symbol = symbol.resize(size, PIL.Image.Resampling.NEAREST)
		ink = PIL.ImageOps.invert(symbol.convert("L"))

		mask = PIL.Image.new("L", image.size, 0)
		mask.paste(ink, (x, y))
		composite(image, mask, self.foreground, item.field_reversed)

	def draw_fallback_text(self, image: PIL.Image.Image, x: int, y: int, text: str) -> None:
		size = max(1, int(round(FALLBACK_TEXT_SIZE * self.config.device_pixel_ratio)))
		font = load_font(PROPORTIONAL_FONT_NAME, size)
		draw = PIL.ImageDraw.Draw(image)
		draw.text((x, y), text, fill=PIL.ImageColor.getrgb(FALLBACK_TEXT_COLOR), font=font)


#============================================
def render(label: Label, config: RenderConfig | None = None) -> PIL.Image.Image:
	"""
	Render a label with a one-off renderer.

	Args:
		label: Parsed label.
		config: Render configuration, defaults when omitted.

	Returns:
		RGB image.
	"""
	renderer = ZplRenderer(config)
	return renderer.render(label)


#============================================
def save_png(image: PIL.Image.Image, path: pathlib.Path) -> None:
	image.save(str(path), format="PNG")


#============================================
def save_pdf(image: PIL.Image.Image, path: pathlib.Path) -> None:
	"""
	Write the preview as a one page PDF.

	The page is half the pixel size in points, so a 4x6 inch label at the
	default settings lands on a 200x300 point page.

	Args:
		image: Rendered preview.
		path: Output PDF path.
	"""
	page_width = image.width / 2.0
	page_height = image.height / 2.0
	pdf = reportlab.pdfgen.canvas.Canvas(str(path), pagesize=(page_width, page_height))
	pdf.drawImage(
		reportlab.lib.utils.ImageReader(image),
		0,
		0,
		width=page_width,
		height=page_height,
	)
	pdf.showPage()
	pdf.save()
