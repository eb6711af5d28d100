"""
CLI entry point for ZPL label previews.
"""

# Standard Library
import argparse
import logging
import pathlib
import sys
import time

# local repo modules
import zpl_label_preview as zlp
import zpl_label_preview.catalog
import zpl_label_preview.config
import zpl_label_preview.document
import zpl_label_preview.parser
import zpl_label_preview.render
import zpl_label_preview.template
import zpl_label_preview.tokenizer


RenderConfig = zlp.config.RenderConfig
ZplParser = zlp.parser.ZplParser
Variable = zlp.document.Variable

SUPPORTED_DPI = zlp.config.SUPPORTED_DPI
DEFAULT_DPI = zlp.config.DEFAULT_DPI
DEFAULT_DIMENSIONS = zlp.config.DEFAULT_DIMENSIONS
DEFAULT_ORIENTATION = zlp.config.DEFAULT_ORIENTATION
ORIENTATIONS = zlp.config.ORIENTATIONS
DEFAULT_SCALE = zlp.config.DEFAULT_SCALE


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, sys.argv when None.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Render a ZPL label to a PNG or PDF preview.")
	parser.add_argument("input_path", help="ZPL file, or - to read stdin.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output .png or .pdf path.")
	output_group.add_argument("-c", "--commands", dest="show_commands", action="store_true", help="List the commands used by the label.")

	render_group = parser.add_argument_group("Rendering")
	render_group.add_argument("-d", "--dpi", dest="dpi", type=int, choices=SUPPORTED_DPI, default=DEFAULT_DPI, help="Printer resolution.")
	render_group.add_argument("-s", "--dimensions", dest="dimensions", default=DEFAULT_DIMENSIONS, help="Label size in inches, e.g. 4x6 or 3x1_5.")
	render_group.add_argument("-r", "--orientation", dest="orientation", choices=ORIENTATIONS, default=DEFAULT_ORIENTATION, help="Label orientation.")
	render_group.add_argument("-x", "--scale", dest="scale", type=float, default=DEFAULT_SCALE, help="Uniform render scale.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-t", "--template", dest="template", action="store_true", help="Read the input as a label template.")
	input_group.add_argument("-v", "--var", dest="variables", action="append", default=[], metavar="NAME=VALUE", help="Variable value, repeatable.")
	input_group.add_argument("-f", "--force", dest="force", action="store_true", help="Render even when the label has errors.")
	input_group.add_argument("--debug", dest="debug", action="store_true", help="Log parser and renderer details.")

	args = parser.parse_args(argv)
	try:
		args.assignments = parse_variable_args(args.variables)
	except ValueError as error:
		parser.error(str(error))
	return args


#============================================
def read_source(input_path: str) -> str:
	if input_path == "-":
		return sys.stdin.read()
	return pathlib.Path(input_path).read_text(encoding="utf-8")


#============================================
def parse_variable_args(values: list[str]) -> dict[str, str]:
	"""
	Split NAME=VALUE arguments.

	Args:
		values: Raw --var values.

	Returns:
		Mapping of name to value.
	"""
	assignments: dict[str, str] = {}
	for value in values:
		name, sep, text = value.partition("=")
		if not sep or not name:
			raise ValueError(f"Variable must look like NAME=VALUE, got {value!r}")
		assignments[name] = text
	return assignments


#============================================
def build_render_config(args: argparse.Namespace) -> RenderConfig:
	return RenderConfig(
		dpi=args.dpi,
		dimensions=args.dimensions,
		orientation=args.orientation,
		scale=args.scale,
	)


#============================================
def build_parser(source: str, use_template: bool) -> ZplParser:
	if use_template:
		return zlp.template.zpl(source)
	return ZplParser(source)


#============================================
def apply_variables(parser: ZplParser, assignments: dict[str, str]) -> ZplParser:
	"""
	Fill variables and re-parse the substituted command stream.

	Args:
		parser: Parser whose last parse() was valid.
		assignments: Variable values by name.

	Returns:
		Parser over the substituted ZPL, already parsed.
	"""
	for name, value in assignments.items():
		variable = parser.variables.get(name)
		if variable is None:
			variable = Variable(name=name)
			parser.variables[name] = variable
		variable.value = value
	produced = parser.produce()
	substituted = ZplParser(produced, name=parser.name, variables=parser.variables)
	substituted.parse()
	return substituted


#============================================
def print_commands(parser: ZplParser) -> None:
	"""
	Print catalog details for each distinct command in the label.

	Args:
		parser: Parsed label source.
	"""
	seen: set[str] = set()
	for token in zlp.tokenizer.tokenize(parser.body):
		if token.command in seen:
			continue
		seen.add(token.command)
		if not zlp.catalog.has(token.command):
			print(f"{token.command}: unknown command")
			continue
		info = zlp.catalog.metadata(token.command)
		message = zlp.catalog.implementation_message(token.command)
		print(f"{token.command} {info.display_name}: {message}")
		for manual, page in info.doc_reference.items():
			url = zlp.catalog.reference_url(manual)
			if url is None or page <= 0:
				continue
			print(f"  Reference: {url}#page={page}")


#============================================
def write_preview(image, output_path: pathlib.Path) -> None:
	if output_path.suffix.lower() == ".pdf":
		zlp.render.save_pdf(image, output_path)
	else:
		zlp.render.save_png(image, output_path)


#============================================
def run_pipeline(args: argparse.Namespace) -> int:
	"""
	Parse, optionally substitute, and render one label.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Process exit code.
	"""
	print("ZPL label preview")
	print(f"Input: {args.input_path}")
	if args.output_path:
		print(f"Output: {args.output_path}")
	print(f"DPI: {args.dpi}")
	print(f"Dimensions: {args.dimensions} ({args.orientation})")

	start_time = time.perf_counter()
	source = read_source(args.input_path)
	parser = build_parser(source, args.template)
	result = parser.parse()
	print(f"Label name: {parser.name}")

	if args.assignments and result.is_valid:
		parser = apply_variables(parser, args.assignments)
		result = parser.result
		print(f"Variables substituted: {len(args.assignments)}")

	if args.show_commands:
		print_commands(parser)

	for error in result.errors:
		print(f"Error: {error}")
	print(f"Valid: {result.is_valid}")
	if result.label is None:
		return 1
	print(f"Items: {len(result.label.items)}")
	if not result.is_valid and not args.force:
		return 1
	if not args.output_path:
		return 0

	render_start = time.perf_counter()
	config = build_render_config(args)
	image = zlp.render.render(result.label, config)
	output_path = pathlib.Path(args.output_path)
	write_preview(image, output_path)
	render_end = time.perf_counter()
	print(f"Preview written: {output_path} ({image.width}x{image.height})")
	print(
		"Timing: render={:.2f}s total={:.2f}s".format(
			render_end - render_start,
			render_end - start_time,
		)
	)
	return 0


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	if args.debug:
		logging.basicConfig(level=logging.DEBUG)
	exit_code = run_pipeline(args)
	if exit_code:
		sys.exit(exit_code)
