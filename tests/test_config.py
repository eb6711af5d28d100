import pytest

import zpl_label_preview.config as config


#============================================
def test_parse_dimensions() -> None:
	assert config.parse_dimensions("4x6") == (4.0, 6.0)
	assert config.parse_dimensions("3x1_5") == (3.0, 1.5)
	assert config.parse_dimensions(" 2X1 ") == (2.0, 1.0)


#============================================
@pytest.mark.parametrize("value", ["4", "4x6x2", "ax6", "0x6", ""])
def test_parse_dimensions_rejects_malformed(value: str) -> None:
	with pytest.raises(ValueError):
		config.parse_dimensions(value)


#============================================
def test_render_config_validation() -> None:
	"""
	Out of range settings fail when the config is built.
	"""
	with pytest.raises(ValueError, match="Unsupported DPI"):
		config.RenderConfig(dpi=100)
	with pytest.raises(ValueError):
		config.RenderConfig(orientation="sideways")
	with pytest.raises(ValueError):
		config.RenderConfig(scale=0)
	with pytest.raises(ValueError):
		config.RenderConfig(dimensions="big")


#============================================
def test_dots_to_pixels_factor() -> None:
	render_config = config.RenderConfig(dpi=300, scale=1.5, device_pixel_ratio=2.0)
	assert config.dots_to_pixels_factor(render_config) == pytest.approx(1.0)
	assert config.canvas_size(render_config) == (800, 1200)
