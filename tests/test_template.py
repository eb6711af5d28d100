import logging

import pytest

import zpl_label_preview.document as document
import zpl_label_preview.template as template


#============================================
def test_plain_zpl() -> None:
	zpl_parser = template.zpl("^XA^FO50,50^FDHello, World!^FS^XZ")
	result = zpl_parser.parse()
	assert result.is_valid
	assert result.errors == []
	assert result.variables == {}
	assert zpl_parser.name == "Label"


#============================================
def test_multiline_input_is_collapsed() -> None:
	"""
	Newlines and indentation collapse to single spaces.
	"""
	zpl_parser = template.zpl(
		"""^XA
		^FO50,50
		^FDHello, World!
		^FS
		^XZ"""
	)
	result = zpl_parser.parse()
	assert result.is_valid
	assert zpl_parser.source == "^XA ^FO50,50 ^FDHello, World! ^FS ^XZ"


#============================================
def test_interleaved_values() -> None:
	zpl_parser = template.zpl(("^XA^FO50,50^FD", "^FS^XZ"), "Hello")
	assert zpl_parser.source == "^XA^FO50,50^FDHello^FS^XZ"
	zpl_parser = template.zpl(("^XA^FO50,50^FD", "x^FS^XZ"), None)
	assert zpl_parser.source == "^XA^FO50,50^FDx^FS^XZ"


#============================================
def test_declared_variables() -> None:
	zpl_parser = template.zpl("label Name(message: string) { ^XA^FO50,50^FDmessage^FS^XZ }")
	result = zpl_parser.parse()
	assert result.is_valid
	assert zpl_parser.name == "Name"
	assert result.variables == {
		"message": document.Variable(name="message", type="string", value=""),
	}


#============================================
def test_variable_types() -> None:
	"""
	Unknown or missing types fall back to string.
	"""
	zpl_parser = template.zpl(
		"label Shipping(count: number, urgent: boolean, when: date, note) { ^XA^FO1,1^FDcount^FS^XZ }"
	)
	types = {name: variable.type for name, variable in zpl_parser.variables.items()}
	assert types == {
		"count": "number",
		"urgent": "boolean",
		"when": "string",
		"note": "string",
	}


#============================================
def test_produce_with_substitution() -> None:
	zpl_parser = template.zpl("label Name(message: string) { ^XA^FO50,50^FDmessage^FS^XZ }")
	zpl_parser.parse()
	zpl_parser.variables["message"].value = "Hello, World!"
	assert zpl_parser.produce() == "^XA^FO50,50^FDHello, World!^FS^XZ"


#============================================
def test_produce_round_trip_reparses() -> None:
	zpl_parser = template.zpl(
		"label Tag(name: string, code: number) { ^XA^FO10,10^FDname^FS^FO10,60^BCN,50^FDcode^FS^XZ }"
	)
	assert zpl_parser.parse().is_valid
	zpl_parser.variables["name"].value = "Widget"
	zpl_parser.variables["code"].value = "4711"
	produced = zpl_parser.produce()
	assert produced == "^XA^FO10,10^FDWidget^FS^FO10,60^BCN,50^FD4711^FS^XZ"
	reparsed = template.zpl(produced).parse()
	assert reparsed.is_valid
	assert [item.data for item in reparsed.label.items] == ["Widget", "4711"]


#============================================
def test_produce_leaves_embedded_names() -> None:
	"""
	Names next to spaces or punctuation inside a field are not replaced.
	"""
	zpl_parser = template.zpl("label Name(message: string) { ^XA^FO50,50^FDthe message^FS^XZ }")
	zpl_parser.parse()
	zpl_parser.variables["message"].value = "X"
	assert zpl_parser.produce() == "^XA^FO50,50^FDthe message^FS^XZ"


#============================================
def test_produce_is_idempotent_without_values() -> None:
	zpl_parser = template.zpl("label Name(message: string) { ^XA^FO50,50^FDmessage^FS^XZ }")
	zpl_parser.parse()
	first = zpl_parser.produce()
	assert first == "^XA^FO50,50^FDmessage^FS^XZ"
	assert zpl_parser.produce() == first


#============================================
def test_short_label_syntax() -> None:
	zpl_parser = template.zpl("label { ^XA^FO50,50^FDLabel^FS^XZ }")
	assert zpl_parser.parse().is_valid
	assert zpl_parser.name == "Label"
	zpl_parser = template.zpl("label Badge { ^XA^FO50,50^FDLabel^FS^XZ }")
	assert zpl_parser.name == "Badge"


#============================================
def test_empty_declaration_list() -> None:
	zpl_parser = template.zpl("label Name() { ^XA^FO50,50^FDStatic^FS^XZ }")
	result = zpl_parser.parse()
	assert result.is_valid
	assert result.variables == {}


#============================================
def test_empty_input() -> None:
	result = template.zpl("").parse()
	assert not result.is_valid
	assert "Missing ^XA start command" in result.errors


#============================================
def test_unmatched_braces_fall_back_to_plain() -> None:
	zpl_parser = template.zpl(("label Name(text: string) { ^XA^FO50,50^FD", ""), "Hello")
	result = zpl_parser.parse()
	assert not result.is_valid
	assert "Missing ^XA start command" in result.errors


#============================================
def test_truncation(caplog: pytest.LogCaptureFixture) -> None:
	"""
	Input over the cap is truncated with a warning.
	"""
	with caplog.at_level(logging.WARNING, logger="zpl_label_preview.template"):
		zpl_parser = template.zpl("^XA^FO1,1^FDabcdef^FS^XZ", max_length=12)
	assert zpl_parser.source == "^XA^FO1,1^FD"
	assert "truncated to 12 characters" in caplog.text
	result = zpl_parser.parse()
	assert result.errors == ["Missing ^XZ end command"]


#============================================
def test_max_length_must_be_positive() -> None:
	with pytest.raises(ValueError, match="max_length must be a positive number."):
		template.zpl("^XA^XZ", max_length=0)
