import unittest

import config
import lexer
import line_manager
from align_calls import FuncCallAligner, param_anchors
from chunk_list import TokenKind

def _body(*lines: str) -> str:
	return 'void f(void)\n{\n' + ''.join(('    ' + line if line else '') + '\n' for line in lines) + '}\n'

def _align(source: str, language: str = 'c', **options) -> str:
	stream = lexer.tokenize(source, language)
	FuncCallAligner(stream, config.Config(align_calls=True, **options)).run()
	return line_manager.render(stream)

class ParamAnchorsTest(unittest.TestCase):
	def test_top_level_arguments(self) -> None:
		stream = lexer.tokenize(_body('foo(a, bar(b, c), d);'))
		call = next(idx for idx in stream if stream[idx].text == 'foo')
		self.assertEqual([stream[idx].text for idx in param_anchors(stream, call)], ['a', 'bar', 'd'])

	def test_stops_at_end_of_line(self) -> None:
		stream = lexer.tokenize(_body('foo(a,', '    b);'))
		call = next(idx for idx in stream if stream[idx].text == 'foo')
		self.assertEqual([stream[idx].text for idx in param_anchors(stream, call)], ['a'])

	def test_empty_call(self) -> None:
		stream = lexer.tokenize(_body('foo();'))
		call = next(idx for idx in stream if stream[idx].text == 'foo')
		self.assertEqual(param_anchors(stream, call), [])

class FuncCallAlignerTest(unittest.TestCase):
	def test_aligns_arguments(self) -> None:
		source = _body('foo(1, bar);', 'foo(22, b);', 'foo(3, c);')
		self.assertEqual(_align(source), _body('foo( 1, bar);', 'foo(22, b);', 'foo( 3, c);'))

	def test_keeps_tokens_and_identities(self) -> None:
		stream = lexer.tokenize(_body('foo(1, bar);', 'foo(22, b);'))
		before = [(idx, stream[idx].text) for idx in stream]
		count = len(stream)
		FuncCallAligner(stream, config.Config(align_calls=True)).run()
		self.assertEqual([(idx, stream[idx].text) for idx in stream], before)
		self.assertEqual(len(stream), count)

	def test_on_tabstop(self) -> None:
		source = _body('foo(1, x);', 'foo(22, y);')
		self.assertEqual(_align(source, align_on_tabstop=True),
				_body('foo(1,      x);', 'foo(22,     y);'))

	def test_number_right_with_tabstop(self) -> None:
		source = _body('foo(1, x);', 'foo(22, y);')
		self.assertEqual(_align(source, align_on_tabstop=True, align_number_right=True),
				_body('foo( 1,     x);', 'foo(22,     y);'))

	def test_signed_argument_ends_with_its_literal(self) -> None:
		source = _body('foo(-1, x);', 'foo(22, y);')
		self.assertEqual(_align(source), source)
		self.assertEqual(_align(_body('foo(-1, x);', 'foo(333, y);')),
				_body('foo( -1, x);', 'foo(333, y);'))

	def test_group_applies_when_block_closes(self) -> None:
		source = _body('{', '    foo(1);', '    foo(22);', '}', 'foo(333);')
		self.assertEqual(_align(source), _body('{', '    foo( 1);', '    foo(22);', '}', 'foo(333);'))

	def test_single_call_is_untouched(self) -> None:
		source = _body('foo(1, x);', 'bar(22, y);')
		self.assertEqual(_align(source), source)

	def test_different_name_ends_group(self) -> None:
		source = _body('foo(1);', 'bar(2);', 'foo(333);')
		self.assertEqual(_align(source), source)

	def test_blocks_do_not_align(self) -> None:
		source = _body('{', '    foo(1);', '}', '{', '    foo(22);', '}')
		self.assertEqual(_align(source), source)

	def test_threshold_excludes_far_argument(self) -> None:
		source = _body('put(a, x);', 'put(bb, y);', 'put(cccccccccc, z);')
		stream = lexer.tokenize(source)
		FuncCallAligner(stream, config.Config(align_calls=True, align_thresh=3)).run()
		columns = {stream[idx].text: stream[idx].column for idx in stream}
		self.assertEqual((columns['x'], columns['y'], columns['z']), (13, 13, 21))

	def test_member_call_is_not_line_leading(self) -> None:
		source = _body('obj.foo(1);', 'obj.foo(22);')
		self.assertEqual(_align(source), source)

	def test_qualified_call(self) -> None:
		source = _body('ns::foo(1);', 'ns::foo(22);')
		self.assertEqual(_align(source, 'cpp'), _body('ns::foo( 1);', 'ns::foo(22);'))

	def test_blank_lines_beyond_span(self) -> None:
		source = _body('foo(1);', '', '', '', '', 'foo(22);')
		self.assertEqual(_align(source), source)

	def test_call_kinds(self) -> None:
		stream = lexer.tokenize(_body('foo(1);'))
		kinds = {stream[idx].text: stream[idx].kind for idx in stream}
		self.assertIs(kinds['foo'], TokenKind.FUNC_CALL)

if __name__ == '__main__':
	unittest.main()
