import bisect
import dataclasses
import logging
import pathlib
import re
import typing

from pygments.lexers.c_cpp import CLexer, CppLexer
from pygments.token import Comment, Keyword, Name, Number, Operator, Punctuation, String

from chunk_list import CLOSER, NULL, PAREN_OPENERS, Chunk, ChunkFlag, ChunkList, TokenKind

logger = logging.getLogger(__name__)

EXTENSIONS = {
	'.c': 'c', '.h': 'c',
	'.cpp': 'cpp', '.cc': 'cpp', '.cxx': 'cpp', '.c++': 'cpp', '.hpp': 'cpp', '.hh': 'cpp', '.hxx': 'cpp',
	'.cs': 'cs',
	'.java': 'java',
	'.d': 'd',
	'.m': 'oc', '.mm': 'oc',
	'.vala': 'vala',
	'.p': 'pawn', '.pawn': 'pawn', '.sma': 'pawn',
}

KEYWORDS = {
	'if': TokenKind.IF,
	'else': TokenKind.ELSE,
	'switch': TokenKind.SWITCH,
	'while': TokenKind.WHILE,
	'for': TokenKind.FOR,
	'do': TokenKind.DO,
	'return': TokenKind.RETURN,
	'case': TokenKind.CASE,
	# C++ alternative tokens
	'and': TokenKind.BOOL,
	'or': TokenKind.BOOL,
	'not_eq': TokenKind.COMPARE,
}

OPERATORS = {
	'==': TokenKind.COMPARE, '!=': TokenKind.COMPARE, '<=': TokenKind.COMPARE, '>=': TokenKind.COMPARE,
	'<': TokenKind.COMPARE, '>': TokenKind.COMPARE,
	'&&': TokenKind.BOOL, '||': TokenKind.BOOL,
	'?': TokenKind.QUESTION,
	'::': TokenKind.DC_MEMBER,
	'.': TokenKind.MEMBER, '->': TokenKind.MEMBER,
	',': TokenKind.COMMA,
	';': TokenKind.SEMICOLON,
	'=': TokenKind.ASSIGN,
	'+=': TokenKind.ASSIGN, '-=': TokenKind.ASSIGN, '*=': TokenKind.ASSIGN, '/=': TokenKind.ASSIGN,
	'%=': TokenKind.ASSIGN, '&=': TokenKind.ASSIGN, '|=': TokenKind.ASSIGN, '^=': TokenKind.ASSIGN,
	'<<=': TokenKind.ASSIGN, '>>=': TokenKind.ASSIGN,
}
_ARITH = ('->*', '...', '++', '--', '<<', '>>', '.*', '+', '-', '*', '/', '%', '&', '|', '^', '~', '!')
_BRACKETS = ('(', ')', '[', ']', '{', '}', ':')
_OPERATOR_RE = re.compile('|'.join(re.escape(op) for op in
		sorted(set(OPERATORS) | set(_ARITH) | set(_BRACKETS), key=len, reverse=True)) + '|.')

OPERAND_KINDS = frozenset((TokenKind.WORD, TokenKind.NUMBER, TokenKind.NUMBER_FP, TokenKind.STRING,
		TokenKind.PAREN_CLOSE, TokenKind.FPAREN_CLOSE, TokenKind.SQUARE_CLOSE))
SPAREN_OWNERS = frozenset((TokenKind.IF, TokenKind.ELSEIF, TokenKind.SWITCH, TokenKind.WHILE, TokenKind.FOR))
NON_CODE = frozenset((TokenKind.NEWLINE, TokenKind.COMMENT, TokenKind.PREPROC))

def language_for(path: pathlib.Path) -> str:
	return EXTENSIONS.get(path.suffix.lower(), 'c')

def tokenize(text: str, language: str = 'c', tab_size: int = 8) -> ChunkList:
	return _Tokenizer(text, language, tab_size).run()

Piece = tuple[int, typing.Any, str]

def _split_lines(lexer, text: str) -> typing.Iterator[Piece]:
	for pos, ttype, value in lexer.get_tokens_unprocessed(text):
		while value:
			nl = value.find('\n')
			if nl == -1:
				yield pos, ttype, value
				break
			if nl:
				yield pos, ttype, value[:nl]
			yield pos + nl, ttype, '\n'
			pos += nl + 1
			value = value[nl + 1:]

def _group(ttype, value: str) -> typing.Optional[str]:
	if value == '\n':
		return None
	if ttype in Operator or ttype in Punctuation:
		return 'op'
	if ttype in String:
		return 'str'
	return None

def _merge_adjacent(pieces: typing.Iterable[Piece]) -> typing.Iterator[Piece]:
	pending = None
	for start, ttype, value in pieces:
		group = _group(ttype, value)
		if pending is not None and group is not None and group == pending[3] \
				and pending[0] + len(pending[2]) == start:
			pending[2] += value
			continue
		if pending is not None:
			yield pending[0], pending[1], pending[2]
		pending = [start, ttype, value, group]
	if pending is not None:
		yield pending[0], pending[1], pending[2]

@dataclasses.dataclass
class _PpFrame:
	saved: list[int]
	first_branch: typing.Optional[list[int]] = None

class _Tokenizer:
	def __init__(self, text: str, language: str, tab_size: int) -> None:
		self.text = text
		self.tab_size = tab_size
		self.stream = ChunkList(language)
		self.lexer = CLexer() if language == 'c' else CppLexer()
		self.line_starts = [0] + [m.end() for m in re.finditer('\n', text)]
		self.stack: list[int] = []
		self.questions: list[int] = []
		self.pp_level = 0
		self.pp_frames: list[_PpFrame] = []
		self.prev_sig = NULL
		self.prev_prev_sig = NULL
		self.stmt_start = True
		self.line_has_code = False
		self.skip_until = 0
		self.last_end = 0

	def run(self) -> ChunkList:
		for start, ttype, value in _merge_adjacent(_split_lines(self.lexer, self.text)):
			if start < self.skip_until:
				continue
			self._piece(start, ttype, value)
		return self.stream

	def _piece(self, start: int, ttype, value: str) -> None:
		if value == '\n':
			self._newline(start)
		elif ttype in Comment.Preproc and value.lstrip().startswith('#') and not self.line_has_code:
			self.skip_until = self._directive(start + len(value) - len(value.lstrip()))
		elif ttype in Comment:
			self._add(TokenKind.COMMENT, start, value)
		elif value.isspace():
			pass
		elif ttype in String:
			self._add(TokenKind.STRING, start, value)
		elif ttype in Number:
			self._number(start, ttype, value)
		elif ttype in Keyword or ttype in Name:
			# namespaced names arrive whole from the function-definition rule
			parts = re.split(r'(::)', value)
			offset = 0
			for i, part in enumerate(parts):
				if part == '::':
					self._operator(start + offset, part)
				elif part:
					self._word(start + offset, ttype if i == len(parts) - 1 else Name, part)
				offset += len(part)
		elif ttype in Operator or ttype in Punctuation:
			for match in _OPERATOR_RE.finditer(value):
				self._operator(start + match.start(), match.group())
		else:
			self._add(TokenKind.OTHER, start, value)

	def _position(self, pos: int) -> tuple[int, int]:
		line = bisect.bisect_right(self.line_starts, pos)
		prefix = self.text[self.line_starts[line - 1]:pos]
		return line, len(prefix.expandtabs(self.tab_size)) + 1

	def _context_flags(self) -> ChunkFlag:
		flags = ChunkFlag.NONE
		for idx in self.stack:
			opener = self.stream[idx]
			if opener.kind is TokenKind.SPAREN_OPEN:
				flags |= ChunkFlag.IN_SPAREN
			elif opener.kind is TokenKind.FPAREN_OPEN and opener.parent is TokenKind.FUNC_CALL:
				flags |= ChunkFlag.IN_FCN_CALL
		return flags

	def _brace_level(self) -> int:
		return sum(1 for idx in self.stack if self.stream[idx].kind is TokenKind.BRACE_OPEN)

	def _add(self, kind: TokenKind, start: int, text: str, parent: TokenKind = TokenKind.NONE,
			flags: ChunkFlag = ChunkFlag.NONE) -> int:
		line, col = self._position(start)
		chunk = Chunk(kind, text, orig_line=line, orig_col=col, orig_col_end=col + len(text), column=col,
			level=len(self.stack), brace_level=self._brace_level(), pp_level=self.pp_level,
			parent=parent, flags=flags | self._context_flags(), whitespace=self.text[self.last_end:start])
		self.last_end = start + len(text)
		if kind not in NON_CODE:
			if self.stmt_start:
				chunk.flags |= ChunkFlag.STMT_START
				self.stmt_start = False
			self.line_has_code = True
		idx = self.stream.append(chunk)
		if kind not in NON_CODE:
			self.prev_prev_sig = self.prev_sig
			self.prev_sig = idx
		return idx

	def _newline(self, start: int) -> None:
		last = self.stream[self.stream.tail]
		self.line_has_code = False
		if last.is_newline() and not last.in_preproc() and start == self.last_end:
			last.nl_count += 1
			self.last_end = start + 1
			return
		idx = self._add(TokenKind.NEWLINE, start, '\n')
		self.stream[idx].nl_count = 1

	def _directive(self, start: int) -> int:
		match = re.match(r'#\s*(\w*)', self.text[start:])
		word = match.group(1)
		if word.startswith('if'):
			self.pp_frames.append(_PpFrame(saved=list(self.stack)))
		elif word in ('else', 'elif', 'elifdef', 'elifndef') and self.pp_frames:
			frame = self.pp_frames[-1]
			if frame.first_branch is None:
				frame.first_branch = list(self.stack)
			self.stack = list(frame.saved)
			self.pp_level -= 1
		elif word == 'endif':
			if self.pp_frames:
				frame = self.pp_frames.pop()
				if frame.first_branch is not None:
					self.stack = frame.first_branch
			self.pp_level = max(0, self.pp_level - 1)

		pos = start
		while True:
			nl = self.text.find('\n', pos)
			end = len(self.text) if nl == -1 else nl
			segment = self.text[pos:end].rstrip()
			if segment:
				self._add(TokenKind.PREPROC, pos, segment, flags=ChunkFlag.IN_PREPROC)
			if nl == -1 or end == pos or self.text[end - 1] != '\\':
				break
			idx = self._add(TokenKind.NEWLINE, end, '\n', flags=ChunkFlag.IN_PREPROC)
			self.stream[idx].nl_count = 1
			pos = end + 1
			while pos < len(self.text) and self.text[pos] in ' \t':
				pos += 1

		if word.startswith('if') or word in ('else', 'elif', 'elifdef', 'elifndef'):
			self.pp_level += 1
		logger.debug('directive #%s at line %d, pp level now %d', word, self._position(start)[0], self.pp_level)
		return end

	def _number(self, start: int, ttype, value: str) -> None:
		if value[0] in '+-':
			self._sign(start, value[0])
			start += 1
			value = value[1:]
		kind = TokenKind.NUMBER_FP if ttype in Number.Float else TokenKind.NUMBER
		self._add(kind, start, value)

	def _sign(self, start: int, op: str) -> None:
		if self.stream[self.prev_sig].kind in OPERAND_KINDS:
			self._add(TokenKind.ARITH, start, op)
		else:
			self._add(TokenKind.NEG if op == '-' else TokenKind.POS, start, op)

	def _word(self, start: int, ttype, text: str) -> None:
		if ttype in Keyword.Type:
			kind = TokenKind.TYPE
		elif ttype in Keyword:
			kind = KEYWORDS.get(text, TokenKind.KEYWORD)
			if kind is TokenKind.IF and self.stream[self.prev_sig].kind is TokenKind.ELSE:
				kind = TokenKind.ELSEIF
		elif ttype in Name.Function:
			kind = TokenKind.FUNC_DEF
		elif ttype in Name.Class or ttype in Name.Namespace:
			kind = TokenKind.TYPE
		else:
			kind = TokenKind.WORD
		self._add(kind, start, text)
		if kind in (TokenKind.ELSE, TokenKind.DO):
			self.stmt_start = True

	def _top_kind(self) -> TokenKind:
		return self.stream[self.stack[-1]].kind if self.stack else TokenKind.NONE

	def _open(self, kind: TokenKind, start: int, text: str, parent: TokenKind = TokenKind.NONE) -> None:
		idx = self._add(kind, start, text, parent=parent)
		self.stack.append(idx)

	def _close(self, start: int, text: str, openers: typing.Collection[TokenKind], fallback: TokenKind) -> int:
		depth = len(self.stack)
		while depth > 0 and self.stream[self.stack[depth - 1]].kind not in openers:
			depth -= 1
		if depth == 0:
			logger.debug('unmatched %r at line %d', text, self._position(start)[0])
			return self._add(fallback, start, text)
		if depth < len(self.stack):
			logger.debug('%d unclosed bracket(s) before %r at line %d',
					len(self.stack) - depth, text, self._position(start)[0])
		opener = self.stream[self.stack[depth - 1]]
		del self.stack[depth - 1:]
		self.questions = [level for level in self.questions if level <= len(self.stack)]
		return self._add(CLOSER[opener.kind], start, text, parent=opener.parent)

	def _closes_as_template(self, start: int) -> bool:
		"""Whether the '<' at start has a matching '>' before anything that ends an expression."""
		if self.stream.language == 'c':
			return False
		angles = 1
		brackets = 0
		pos = start + 1
		while pos < len(self.text):
			pair = self.text[pos:pos + 2]
			if pair in ('&&', '||') or self.text[pos] in ';{}?':
				return False
			if pair == '->':
				pos += 2
				continue
			ch = self.text[pos]
			if ch in '([':
				brackets += 1
			elif ch in ')]':
				if brackets == 0:
					return False
				brackets -= 1
			elif ch == '<' and brackets == 0:
				angles += 1
			elif ch == '>' and brackets == 0:
				angles -= 1
				if angles == 0:
					return True
			pos += 1
		return False

	def _operator(self, start: int, op: str) -> None:
		prev = self.stream[self.prev_sig]
		if op == '(':
			if prev.kind is TokenKind.WORD:
				before = self.stream[self.prev_prev_sig].kind
				prev.kind = TokenKind.FUNC_DEF if before in (TokenKind.TYPE, TokenKind.WORD) else TokenKind.FUNC_CALL
			if prev.kind in (TokenKind.FUNC_CALL, TokenKind.FUNC_DEF):
				self._open(TokenKind.FPAREN_OPEN, start, op, prev.kind)
			elif prev.kind in SPAREN_OWNERS:
				self._open(TokenKind.SPAREN_OPEN, start, op, prev.kind)
			else:
				self._open(TokenKind.PAREN_OPEN, start, op)
		elif op == ')':
			idx = self._close(start, op, PAREN_OPENERS, TokenKind.PAREN_CLOSE)
			if self.stream[idx].kind is TokenKind.SPAREN_CLOSE:
				self.stmt_start = True
		elif op == '[':
			self._open(TokenKind.SQUARE_OPEN, start, op)
		elif op == ']':
			self._close(start, op, (TokenKind.SQUARE_OPEN,), TokenKind.SQUARE_CLOSE)
		elif op == '{':
			self._open(TokenKind.BRACE_OPEN, start, op)
			self.stmt_start = True
		elif op == '}':
			self._close(start, op, (TokenKind.BRACE_OPEN,), TokenKind.BRACE_CLOSE)
			self.stmt_start = True
		elif op == '<' and (prev.text == 'template' or self._top_kind() is TokenKind.ANGLE_OPEN
				or (prev.kind in (TokenKind.TYPE, TokenKind.WORD) and self._closes_as_template(start))):
			self._open(TokenKind.ANGLE_OPEN, start, op)
		elif op == '>' and self._top_kind() is TokenKind.ANGLE_OPEN:
			self._close(start, op, (TokenKind.ANGLE_OPEN,), TokenKind.ANGLE_CLOSE)
		elif op == '>>' and self._top_kind() is TokenKind.ANGLE_OPEN:
			self._operator(start, '>')
			self._operator(start + 1, '>')
		elif op == ':':
			if self.questions and self.questions[-1] == len(self.stack):
				self.questions.pop()
				self._add(TokenKind.COND_COLON, start, op)
			else:
				self._add(TokenKind.COLON, start, op)
		elif op == '?':
			self.questions.append(len(self.stack))
			self._add(TokenKind.QUESTION, start, op)
		elif op == ';':
			self.questions = [level for level in self.questions if level < len(self.stack)]
			self._add(TokenKind.SEMICOLON, start, op)
			self.stmt_start = True
		elif op == '::':
			if prev.kind is TokenKind.WORD:
				prev.kind = TokenKind.TYPE
			self._add(TokenKind.DC_MEMBER, start, op)
		elif op in ('+', '-'):
			self._sign(start, op)
		else:
			self._add(OPERATORS.get(op, TokenKind.ARITH), start, op)
