#!/usr/bin/env python3

import difflib
import logging
import typing

import align_calls
import config as configuration
import lexer
import line_manager
import parens

logger = logging.getLogger(__name__)

def main() -> None:
	config = configuration.make_config()
	logging.basicConfig(level=logging.DEBUG if config.verbose else logging.WARNING,
			format='%(name)s: %(message)s')
	for path in config.filepaths:
		language = config.language or lexer.language_for(path)
		if config.diff:
			with path.open('r', errors='surrogateescape', newline='') as f:
				orig_lines = f.readlines()
			with path.open('rb') as f:
				formatted = beautify(f, config, language).decode(errors='surrogateescape')
				formatted_lines = formatted.splitlines(keepends=True)
			print(''.join(difflib.unified_diff(orig_lines, formatted_lines, str(path), str(path))), end='')
		else:
			with path.open('rb') as f:
				print(beautify(f, config, language).decode(errors='surrogateescape'), end='')

def beautify(f: typing.BinaryIO, config: configuration.Config, language: str = 'c') -> bytes:
	lines = f.read().decode(errors='surrogateescape').split('\n')
	# passes never add or remove line breaks; endings are restored by line number
	crlf = [line.endswith('\r') for line in lines[:-1]]
	source = '\n'.join(line[:-1] if cr else line for line, cr in zip(lines, crlf + [False]))

	stream = lexer.tokenize(source, language, config.input_tab_size)
	logger.debug('%d chunks, language %s', len(stream), language)
	if config.any_parens():
		parens.ParenInserter(stream, config).run()
	if config.align_calls:
		align_calls.FuncCallAligner(stream, config).run()

	formatted = line_manager.render(stream, config.output_tab_size, config.indent_with_tabs).split('\n')
	endings = ['\r\n' if cr else '\n' for cr in crlf] + ['']
	return ''.join(line + ending for line, ending in zip(formatted, endings)).encode(errors='surrogateescape')

if __name__ == '__main__':
	main()
