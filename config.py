import argparse
import dataclasses
import pathlib
import typing

LANGUAGES = ('c', 'cpp', 'cs', 'java', 'd', 'oc', 'vala', 'pawn')

@dataclasses.dataclass
class Config:
	filepaths: list[pathlib.Path] = dataclasses.field(default_factory=list)
	diff: bool = False
	verbose: bool = False
	language: typing.Optional[str] = None

	align_calls: bool = False
	align_span: int = 3
	align_thresh: int = 0
	align_number_right: bool = False
	align_on_tabstop: bool = False

	paren_if_bool: bool = False
	paren_assign_bool: bool = False
	paren_return_bool: bool = False
	paren_exclude_langs: frozenset[str] = frozenset({'cs'})

	input_tab_size: int = 8
	output_tab_size: int = 8
	indent_with_tabs: bool = False

	def any_parens(self) -> bool:
		return self.paren_if_bool or self.paren_assign_bool or self.paren_return_bool

def _parse_args(argv: typing.Optional[list[str]]):
	parser = argparse.ArgumentParser(prog='tidyc')
	parser.add_argument('-d', '--diff', action='store_true', default=False,
			help='output a unified diff instead of formatted code')
	parser.add_argument('-v', '--verbose', action='store_true', default=False,
			help='log pass decisions')
	parser.add_argument('--lang', choices=LANGUAGES,
			help='language variant (default: from the file extension)')

	align = parser.add_argument_group('call alignment')
	align.add_argument('--align-calls', action='store_true', default=False,
			help='align the arguments of consecutive calls to the same function')
	align.add_argument('--span', type=int, default=3, metavar='LINES',
			help='lines an alignment group may span (default: %(default)s)')
	align.add_argument('--thresh', type=int, default=0, metavar='COLUMNS',
			help='column gap that excludes a row from the group (0 = no limit)')
	align.add_argument('--number-right', action='store_true', default=False,
			help='right align numeric arguments')
	align.add_argument('--on-tabstop', action='store_true', default=False,
			help='align on output tab stops')

	parens = parser.add_argument_group('parenthesis insertion')
	parens.add_argument('--paren-if-bool', action='store_true', default=False,
			help='parenthesize comparisons in if/switch conditions')
	parens.add_argument('--paren-assign-bool', action='store_true', default=False,
			help='parenthesize comparisons in assigned values')
	parens.add_argument('--paren-return-bool', action='store_true', default=False,
			help='parenthesize comparisons in returned values')
	parens.add_argument('--paren-exclude-lang', action='append', choices=LANGUAGES,
			metavar='LANG', help='language never parenthesized (default: cs)')

	layout = parser.add_argument_group('layout')
	layout.add_argument('--input-tab-size', type=int, default=8, metavar='N')
	layout.add_argument('--output-tab-size', type=int, default=8, metavar='N')
	layout.add_argument('--indent-with-tabs', action='store_true', default=False)

	parser.add_argument('filepaths', nargs='+', type=pathlib.Path,
			help='files to format')
	return parser.parse_intermixed_args(argv)

def make_config(argv: typing.Optional[list[str]] = None) -> Config:
	options = _parse_args(argv)
	exclude = frozenset(options.paren_exclude_lang or ('cs',))
	span = options.span if options.span > 0 else 3
	return Config(
		filepaths=options.filepaths,
		diff=options.diff,
		verbose=options.verbose,
		language=options.lang,
		align_calls=options.align_calls,
		align_span=span,
		align_thresh=options.thresh,
		align_number_right=options.number_right,
		align_on_tabstop=options.on_tabstop,
		paren_if_bool=options.paren_if_bool,
		paren_assign_bool=options.paren_assign_bool,
		paren_return_bool=options.paren_return_bool,
		paren_exclude_langs=exclude,
		input_tab_size=options.input_tab_size,
		output_tab_size=options.output_tab_size,
		indent_with_tabs=options.indent_with_tabs,
	)
