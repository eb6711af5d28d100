import zpl_label_preview.tokenizer as tokenizer

Token = tokenizer.Token


#============================================
def test_tokenize_field() -> None:
	"""
	Commands split at the next control character.
	"""
	tokens = tokenizer.tokenize("^FO50,50^FDHello World^FS")
	assert tokens == [
		Token("^FO", "50,50"),
		Token("^FD", "Hello World"),
		Token("^FS", ""),
	]


#============================================
def test_params_are_trimmed() -> None:
	tokens = tokenizer.tokenize("^FO 10,20 \n^FS\n")
	assert tokens == [Token("^FO", "10,20"), Token("^FS", "")]


#============================================
def test_font_short_form_folds_into_a() -> None:
	"""
	^A0N,30 is the ^A command with the font letter in front of the params.
	"""
	assert tokenizer.tokenize("^A0N,30,40") == [Token("^A", "0N,30,40")]
	assert tokenizer.tokenize("^AB,20") == [Token("^A", "B,20")]


#============================================
def test_font_at_command_keeps_its_key() -> None:
	assert tokenizer.tokenize("^A@N,30") == [Token("^A@", "N,30")]


#============================================
def test_tilde_commands_and_junk() -> None:
	"""
	Text before the first command and lowercase commands are skipped.
	"""
	assert tokenizer.tokenize("junk~JA") == [Token("~JA", "")]
	assert tokenizer.tokenize("^fo10,10") == []


#============================================
def test_empty_body() -> None:
	assert tokenizer.tokenize("") == []


#============================================
def test_normalize_input() -> None:
	assert tokenizer.normalize_input("  ^XA\r\n^XZ \n") == "^XA\n^XZ"
