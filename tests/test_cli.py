import pathlib

import PIL.Image
import pytest

import zpl_label_preview.cli as cli


#============================================
def test_renders_png(tmp_path: pathlib.Path, write_zpl, capsys: pytest.CaptureFixture) -> None:
	"""
	A valid label is rendered at the requested size.
	"""
	input_path = write_zpl("^XA\n^FO50,50^A0N,50,50^FDHello World^FS\n^XZ\n")
	output_path = tmp_path / "label.png"
	cli.main([str(input_path), "-o", str(output_path), "--orientation", "landscape"])
	captured = capsys.readouterr()
	assert "Valid: True" in captured.out
	assert "Items: 1" in captured.out
	with PIL.Image.open(output_path) as image:
		assert image.size == (600, 400)


#============================================
def test_renders_pdf(tmp_path: pathlib.Path, write_zpl) -> None:
	input_path = write_zpl("^XA^FO10,10^GB100,100,100^FS^XZ")
	output_path = tmp_path / "label.pdf"
	cli.main([str(input_path), "-o", str(output_path), "--dpi", "300"])
	assert output_path.read_bytes().startswith(b"%PDF")


#============================================
def test_invalid_label_exits_non_zero(tmp_path: pathlib.Path, write_zpl, capsys: pytest.CaptureFixture) -> None:
	input_path = write_zpl("^XA^FO10,10^FDok^FS^IN^XZ")
	output_path = tmp_path / "label.png"
	with pytest.raises(SystemExit) as error:
		cli.main([str(input_path), "-o", str(output_path)])
	assert error.value.code == 1
	assert "Error: Invalid command: ^IN" in capsys.readouterr().out
	assert not output_path.exists()


#============================================
def test_force_renders_invalid_label(tmp_path: pathlib.Path, write_zpl) -> None:
	input_path = write_zpl("^XA^FO10,10^FDok^FS^IN^XZ")
	output_path = tmp_path / "label.png"
	cli.main([str(input_path), "-o", str(output_path), "--force"])
	assert output_path.exists()


#============================================
def test_template_variables(tmp_path: pathlib.Path, write_zpl, capsys: pytest.CaptureFixture) -> None:
	"""
	Template variables are substituted before rendering.
	"""
	input_path = write_zpl(
		"label Badge(name: string) {\n^XA\n^FO50,50^FDname^FS\n^XZ\n}\n",
	)
	cli.main([str(input_path), "--template", "--var", "name=Ada", "--commands"])
	output = capsys.readouterr().out
	assert "Label name: Badge" in output
	assert "Variables substituted: 1" in output
	assert "^FO Field Origin: This command is fully implemented." in output


#============================================
def test_parse_variable_args() -> None:
	assert cli.parse_variable_args(["a=1", "b=x=y", "c="]) == {"a": "1", "b": "x=y", "c": ""}
	with pytest.raises(ValueError):
		cli.parse_variable_args(["novalue"])


#============================================
def test_apply_variables_reparses() -> None:
	zpl_parser = cli.build_parser("label T(code: number) { ^XA^FO1,1^FDcode^FS^XZ }", True)
	zpl_parser.parse()
	substituted = cli.apply_variables(zpl_parser, {"code": "42"})
	assert substituted.result.is_valid
	assert substituted.result.label.items[0].data == "42"
	assert substituted.name == "T"


#============================================
def test_malformed_variable_is_a_usage_error(write_zpl, capsys: pytest.CaptureFixture) -> None:
	input_path = write_zpl("^XA^FO1,1^FDname^FS^XZ")
	with pytest.raises(SystemExit) as error:
		cli.main([str(input_path), "--var", "novalue"])
	assert error.value.code == 2
	assert "Variable must look like NAME=VALUE" in capsys.readouterr().err


#============================================
def test_commands_list_manual_reference(write_zpl, capsys: pytest.CaptureFixture) -> None:
	"""
	Commands with a manual page print a link to it.
	"""
	input_path = write_zpl("^XA^FO50,50^FDhello^FS^XZ")
	cli.main([str(input_path), "--commands"])
	output = capsys.readouterr().out
	assert "zpl-zbi2-pm-en.pdf#page=201" in output
