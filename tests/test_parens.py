import unittest

import config
import lexer
import line_manager
from chunk_list import TokenKind
from parens import ParenInserter

CONFIG = config.Config(paren_if_bool=True, paren_assign_bool=True, paren_return_bool=True)

def _body(*lines: str) -> str:
	return 'void f(void)\n{\n' + ''.join('    ' + line + '\n' for line in lines) + '}\n'

def _parens(source: str, language: str = 'c', cfg: config.Config = CONFIG) -> tuple[str, int]:
	stream = lexer.tokenize(source, language)
	count = ParenInserter(stream, cfg).run()
	return line_manager.render(stream), count

class ParenInserterTest(unittest.TestCase):
	def test_if_conditions(self) -> None:
		self.assertEqual(_parens(_body('if (a && b == 1)', '    go();')),
				(_body('if (a && (b == 1))', '    go();'), 1))
		self.assertEqual(_parens(_body('if (a == 1 || b > 2)', '    go();')),
				(_body('if ((a == 1) || (b > 2))', '    go();'), 2))

	def test_without_comparison_is_untouched(self) -> None:
		source = _body('if (!a && b)', '    go();')
		self.assertEqual(_parens(source), (source, 0))

	def test_switch(self) -> None:
		self.assertEqual(_parens(_body('switch (a == 1 || b)', '{', '}'))[0],
				_body('switch ((a == 1) || b)', '{', '}'))

	def test_assignment_and_return(self) -> None:
		self.assertEqual(_parens(_body('x = a == 1 || b;', 'return a && b >= 2;'))[0],
				_body('x = (a == 1) || b;', 'return a && (b >= 2);'))

	def test_ternary(self) -> None:
		self.assertEqual(_parens(_body('x = a == 1 ? b : c;'))[0], _body('x = (a == 1) ? b : c;'))

	def test_nested_call_argument(self) -> None:
		self.assertEqual(_parens(_body('if (check(a == 1, b) && c)', '    go();'))[0],
				_body('if (check((a == 1), b) && c)', '    go();'))

	def test_idempotent(self) -> None:
		source = _body('if (a == 1 || b > 2 && c)', '    go();', 'x = a < b || c != d;', 'return a && b >= 2;')
		once, count = _parens(source)
		self.assertGreater(count, 0)
		self.assertEqual(_parens(once), (once, 0))

	def test_flags_are_independent(self) -> None:
		source = _body('if (a && b == 1)', '    x = a == 1 || b;')
		cfg = config.Config(paren_assign_bool=True)
		self.assertEqual(_parens(source, cfg=cfg)[0], _body('if (a && b == 1)', '    x = (a == 1) || b;'))

	def test_preprocessor_region_bails(self) -> None:
		source = ('void f(void)\n{\n    if (a == 1\n#ifdef EXTRA\n        || b == 2\n#endif\n        )\n'
			'        run();\n}\n')
		self.assertEqual(_parens(source), (source, 0))

	def test_directive_after_boundary_bails_whole_condition(self) -> None:
		source = ('void f(void)\n{\n    if (a == 1 || b\n#ifdef X\n        || c\n#endif\n        )\n'
			'        go();\n}\n')
		self.assertEqual(_parens(source), (source, 0))

	def test_directive_in_nested_paren_bails_outer_condition(self) -> None:
		source = ('void f(void)\n{\n    if (a == 1 || (b\n#ifdef X\n        && c\n#endif\n        ) || d == 2)\n'
			'        go();\n}\n')
		self.assertEqual(_parens(source), (source, 0))

	def test_template_arguments_are_not_split(self) -> None:
		source = _body('if (std::is_same<T, int>::value && n == 0)', '    go();')
		self.assertEqual(_parens(source, 'cpp'),
				(_body('if (std::is_same<T, int>::value && (n == 0))', '    go();'), 1))

	def test_excluded_language(self) -> None:
		source = _body('if (a && b == 1)', '    go();')
		self.assertEqual(_parens(source, 'cs'), (source, 0))
		self.assertEqual(_parens(source, 'cpp')[1], 1)

	def test_while_assignment_is_skipped(self) -> None:
		source = _body('while (c = a == b)', '    go();')
		self.assertEqual(_parens(source), (source, 0))

	def test_return_in_braceless_while(self) -> None:
		self.assertEqual(_parens(_body('while (c)', '    return a && b == 1;'))[0],
				_body('while (c)', '    return a && (b == 1);'))

	def test_semicolon_resets_scan(self) -> None:
		stream = lexer.tokenize(_body('x = (a == 1; b && c);'))
		popen = next(idx for idx in stream if stream[idx].kind is TokenKind.PAREN_OPEN)
		inserter = ParenInserter(stream, CONFIG)
		inserter.check_bool_parens(popen, stream.closing(popen), 0)
		self.assertEqual(inserter.inserted, 0)

	def test_levels_and_columns(self) -> None:
		stream = lexer.tokenize(_body('if (a && b == 1)', '    go();'))
		before = {idx: (stream[idx].text, stream[idx].level) for idx in stream}
		go_column = next(stream[idx].column for idx in stream if stream[idx].text == 'go')
		ParenInserter(stream, CONFIG).run()

		wrapped = {'b', '==', '1'}
		for idx, (text, level) in before.items():
			self.assertEqual(stream[idx].level, level + (1 if text in wrapped else 0), text)
		added = [idx for idx in stream if idx not in before]
		self.assertEqual([stream[idx].text for idx in added], ['(', ')'])
		self.assertEqual([stream[idx].level for idx in added], [2, 2])
		self.assertEqual([stream[idx].column for idx in added], [14, 21])

		columns = {stream[idx].text: stream[idx].column for idx in stream}
		sclose = next(idx for idx in stream if stream[idx].kind is TokenKind.SPAREN_CLOSE)
		self.assertEqual((columns['b'], columns['1'], stream[sclose].column), (15, 20, 22))
		self.assertEqual(columns['go'], go_column)

	def test_splice_is_noop_for_adjacent_endpoints(self) -> None:
		stream = lexer.tokenize(_body('x = a;'))
		assign = next(idx for idx in stream if stream[idx].kind is TokenKind.ASSIGN)
		inserter = ParenInserter(stream, CONFIG)
		inserter.add_parens_between(assign, stream.next(assign))
		self.assertEqual(inserter.inserted, 0)
		self.assertEqual(line_manager.render(stream), _body('x = a;'))

if __name__ == '__main__':
	unittest.main()
