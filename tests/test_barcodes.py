import PIL.Image
import pytest

import zpl_label_preview.barcodes as barcodes
import zpl_label_preview.document as document


#============================================
def count_dark_pixels(image: PIL.Image.Image, threshold: int = 128) -> int:
	"""
	Count pixels darker than a threshold.

	Args:
		image: Image to scan.
		threshold: Gray level cutoff.

	Returns:
		Number of dark pixels.
	"""
	gray = image.convert("L")
	histogram = gray.histogram()
	return sum(histogram[:threshold])


#============================================
@pytest.mark.parametrize(
	"symbology, data",
	[
		(document.CODE128, "12345678"),
		(document.CODE39, "*ABC-123*"),
		(document.EAN13, "400638133393"),
		(document.INTERLEAVED_2_OF_5, "12345670"),
		(document.DATAMATRIX, "data matrix"),
		(document.QRCODE, "QA,https://example.com"),
	],
)
def test_generate_draws_symbol(symbology: str, data: str) -> None:
	config = barcodes.BarcodeImageConfig(module_width=2, height_mm=5, show_text=False)
	image = barcodes.generate(symbology, data, config)
	assert image.mode == "RGB"
	assert image.width > 0 and image.height > 0
	assert count_dark_pixels(image) > 0


#============================================
def test_orientation_rotates_symbol() -> None:
	upright_config = barcodes.BarcodeImageConfig(module_width=2, height_mm=5, show_text=False)
	rotated_config = barcodes.BarcodeImageConfig(
		module_width=2, height_mm=5, show_text=False, orientation="R"
	)
	upright = barcodes.generate(document.CODE128, "12345678", upright_config)
	rotated = barcodes.generate(document.CODE128, "12345678", rotated_config)
	assert rotated.size == (upright.height, upright.width)


#============================================
def test_module_width_scales_symbol() -> None:
	narrow = barcodes.generate(
		document.CODE128, "12345678", barcodes.BarcodeImageConfig(module_width=1, show_text=False)
	)
	wide = barcodes.generate(
		document.CODE128, "12345678", barcodes.BarcodeImageConfig(module_width=3, show_text=False)
	)
	assert wide.width > narrow.width * 2


#============================================
def test_qr_magnification_sets_module_size() -> None:
	config = barcodes.BarcodeImageConfig(qr_magnification=3)
	image = barcodes.generate(document.QRCODE, "QA,hello", config)
	assert image.width == image.height
	assert image.width % 3 == 0


#============================================
def test_split_qr_field() -> None:
	assert barcodes.split_qr_field("QA,hello", "Q") == ("Q", "hello")
	assert barcodes.split_qr_field("HM,a,b", "Q") == ("H", "a,b")
	assert barcodes.split_qr_field("hello", "M") == ("M", "hello")


#============================================
@pytest.mark.parametrize(
	"symbology, data",
	[
		(document.CODE39, "*ABC!*"),
		(document.EAN13, "ABC"),
		(document.CODE128, ""),
		("pdf417", "12345"),
	],
)
def test_invalid_data_raises(symbology: str, data: str) -> None:
	config = barcodes.BarcodeImageConfig()
	with pytest.raises(barcodes.BarcodeGenerationError):
		barcodes.generate(symbology, data, config)
