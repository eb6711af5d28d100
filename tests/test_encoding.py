import pytest

import zpl_label_preview.encoding as encoding


#============================================
def test_ascii_passes_through() -> None:
	"""
	Printable ASCII maps to itself.
	"""
	assert encoding.encode("Hello, World!") == "Hello, World!"


#============================================
def test_utf8_bytes_decoded_one_glyph_each() -> None:
	"""
	A two byte UTF-8 character prints as two code page glyphs.
	"""
	# "é" is C3 A9 in UTF-8
	assert encoding.encode("é") == "├®"


#============================================
def test_hex_escapes_decode_single_bytes() -> None:
	"""
	With ^FH active, _XX becomes one byte looked up in the code page.
	"""
	assert encoding.encode("A_41B", hex_mode=True) == "AAB"
	assert encoding.encode("Caf_82", hex_mode=True) == "Café"
	assert encoding.encode("_4a_4A", hex_mode=True) == "JJ"


#============================================
def test_hex_escapes_ignored_without_hex_mode() -> None:
	assert encoding.encode("_41") == "_41"


#============================================
def test_hex_mode_keeps_incomplete_escapes() -> None:
	assert encoding.encode("100_", hex_mode=True) == "100_"
	assert encoding.encode("_4G", hex_mode=True) == "_4G"


#============================================
def test_code_page_is_total() -> None:
	"""
	Every byte value has an entry.
	"""
	assert sorted(encoding.CODE_PAGE) == list(range(256))


#============================================
def test_device_substitutions() -> None:
	assert encoding.decode_byte(10) == ""
	assert encoding.decode_byte(26) == "0"
	assert encoding.decode_byte(31) == "\\"
	assert encoding.decode_byte(127) == "⌂"
	assert encoding.decode_byte(0x82) == "é"
	assert encoding.decode_byte(213) == "i"
	assert encoding.decode_byte(240) == "-"
	assert encoding.decode_byte(241) == "Ð"
	assert encoding.decode_byte(242) == "±"
	assert encoding.decode_byte(255) == " "


#============================================
def test_unmapped_byte_raises() -> None:
	with pytest.raises(encoding.ZplEncodeError, match="no corresponding CodePage 850 mapping"):
		encoding.decode_byte(256)


#============================================
def test_raw_encode_and_character_codes() -> None:
	assert encoding.raw_encode("é") == "\xc3\xa9"
	assert encoding.character_codes("Aé") == [65, 195, 169]
