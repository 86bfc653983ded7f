import dataclasses
import enum
import typing

NULL = -1

class TokenKind(enum.Enum):
	NONE = enum.auto()
	NEWLINE = enum.auto()
	COMMENT = enum.auto()
	PREPROC = enum.auto()
	WORD = enum.auto()
	TYPE = enum.auto()
	KEYWORD = enum.auto()
	FUNC_CALL = enum.auto()
	FUNC_DEF = enum.auto()
	NUMBER = enum.auto()
	NUMBER_FP = enum.auto()
	POS = enum.auto()
	NEG = enum.auto()
	STRING = enum.auto()
	COMMA = enum.auto()
	SEMICOLON = enum.auto()
	COMPARE = enum.auto()
	BOOL = enum.auto()
	QUESTION = enum.auto()
	COND_COLON = enum.auto()
	COLON = enum.auto()
	ASSIGN = enum.auto()
	ARITH = enum.auto()
	MEMBER = enum.auto()
	DC_MEMBER = enum.auto()
	IF = enum.auto()
	ELSEIF = enum.auto()
	ELSE = enum.auto()
	SWITCH = enum.auto()
	WHILE = enum.auto()
	FOR = enum.auto()
	DO = enum.auto()
	RETURN = enum.auto()
	CASE = enum.auto()
	OTHER = enum.auto()
	PAREN_OPEN = enum.auto()
	PAREN_CLOSE = enum.auto()
	SPAREN_OPEN = enum.auto()
	SPAREN_CLOSE = enum.auto()
	FPAREN_OPEN = enum.auto()
	FPAREN_CLOSE = enum.auto()
	BRACE_OPEN = enum.auto()
	BRACE_CLOSE = enum.auto()
	SQUARE_OPEN = enum.auto()
	SQUARE_CLOSE = enum.auto()
	ANGLE_OPEN = enum.auto()
	ANGLE_CLOSE = enum.auto()

CLOSER = {
	TokenKind.PAREN_OPEN: TokenKind.PAREN_CLOSE,
	TokenKind.SPAREN_OPEN: TokenKind.SPAREN_CLOSE,
	TokenKind.FPAREN_OPEN: TokenKind.FPAREN_CLOSE,
	TokenKind.BRACE_OPEN: TokenKind.BRACE_CLOSE,
	TokenKind.SQUARE_OPEN: TokenKind.SQUARE_CLOSE,
	TokenKind.ANGLE_OPEN: TokenKind.ANGLE_CLOSE,
}
PAREN_OPENERS = frozenset((TokenKind.PAREN_OPEN, TokenKind.SPAREN_OPEN, TokenKind.FPAREN_OPEN))
OPENERS = frozenset(CLOSER)
CLOSERS = frozenset(CLOSER.values())

class ChunkFlag(enum.Flag):
	NONE = 0
	IN_PREPROC = enum.auto()
	STMT_START = enum.auto()
	IN_SPAREN = enum.auto()
	IN_FCN_CALL = enum.auto()

# flags a synthetic chunk inherits from its neighbor
COPY_FLAGS = ChunkFlag.IN_PREPROC | ChunkFlag.IN_SPAREN | ChunkFlag.IN_FCN_CALL

class Scope(enum.Enum):
	ALL = enum.auto()
	PREPROC = enum.auto()

@dataclasses.dataclass(eq=False)
class Chunk:
	kind: TokenKind
	text: str
	orig_line: int = 0
	orig_col: int = 0
	orig_col_end: int = 0
	column: int = 0
	level: int = 0
	brace_level: int = 0
	pp_level: int = 0
	parent: TokenKind = TokenKind.NONE
	flags: ChunkFlag = ChunkFlag.NONE
	nl_count: int = 0
	# source text between the previous chunk on the line and this one
	whitespace: str = ''
	prev: int = NULL
	next: int = NULL

	def is_newline(self) -> bool:
		return self.kind is TokenKind.NEWLINE

	def is_comment(self) -> bool:
		return self.kind is TokenKind.COMMENT

	def in_preproc(self) -> bool:
		return ChunkFlag.IN_PREPROC in self.flags

	@property
	def width(self) -> int:
		return len(self.text)

	def __repr__(self) -> str:
		return f'Chunk({self.kind.name}, {self.text!r}, line={self.orig_line}, col={self.column}, level={self.level})'

NULL_CHUNK = Chunk(TokenKind.NONE, '')

class ChunkList:
	"""Tokens live in one append-only list and are linked in stream order by index."""

	def __init__(self, language: str = 'c') -> None:
		self.chunks: list[Chunk] = []
		self.head = NULL
		self.tail = NULL
		self.language = language

	def __getitem__(self, idx: int) -> Chunk:
		if idx == NULL:
			return NULL_CHUNK
		return self.chunks[idx]

	def __len__(self) -> int:
		return len(self.chunks)

	def __iter__(self) -> typing.Iterator[int]:
		idx = self.head
		while idx != NULL:
			yield idx
			idx = self.chunks[idx].next

	def append(self, chunk: Chunk) -> int:
		if self.tail == NULL:
			return self._store(chunk, NULL, NULL)
		return self.add_after(self.tail, chunk)

	def add_after(self, idx: int, chunk: Chunk) -> int:
		return self._store(chunk, idx, self.chunks[idx].next)

	def add_before(self, idx: int, chunk: Chunk) -> int:
		return self._store(chunk, self.chunks[idx].prev, idx)

	def _store(self, chunk: Chunk, prev: int, next: int) -> int:
		new = len(self.chunks)
		chunk.prev = prev
		chunk.next = next
		self.chunks.append(chunk)
		if prev == NULL:
			self.head = new
		else:
			self.chunks[prev].next = new
		if next == NULL:
			self.tail = new
		else:
			self.chunks[next].prev = new
		return new

	def next(self, idx: int, scope: Scope = Scope.ALL) -> int:
		return self._step(idx, 'next', scope)

	def prev(self, idx: int, scope: Scope = Scope.ALL) -> int:
		return self._step(idx, 'prev', scope)

	def _step(self, idx: int, direction: str, scope: Scope) -> int:
		if idx == NULL:
			return NULL
		start_in_pp = self.chunks[idx].in_preproc()
		idx = getattr(self.chunks[idx], direction)
		if scope is Scope.PREPROC:
			if start_in_pp:
				if idx != NULL and not self.chunks[idx].in_preproc():
					return NULL
			else:
				while idx != NULL and self.chunks[idx].in_preproc():
					idx = getattr(self.chunks[idx], direction)
		return idx

	def next_nc(self, idx: int, scope: Scope = Scope.ALL) -> int:
		idx = self.next(idx, scope)
		while idx != NULL and self.chunks[idx].is_comment():
			idx = self.next(idx, scope)
		return idx

	def prev_nc(self, idx: int, scope: Scope = Scope.ALL) -> int:
		idx = self.prev(idx, scope)
		while idx != NULL and self.chunks[idx].is_comment():
			idx = self.prev(idx, scope)
		return idx

	def next_nc_nnl(self, idx: int, scope: Scope = Scope.ALL) -> int:
		idx = self.next(idx, scope)
		while idx != NULL and (self.chunks[idx].is_comment() or self.chunks[idx].is_newline()):
			idx = self.next(idx, scope)
		return idx

	def prev_nc_nnl(self, idx: int, scope: Scope = Scope.ALL) -> int:
		idx = self.prev(idx, scope)
		while idx != NULL and (self.chunks[idx].is_comment() or self.chunks[idx].is_newline()):
			idx = self.prev(idx, scope)
		return idx

	def next_type(self, idx: int, kind: TokenKind, level: typing.Optional[int] = None,
			scope: Scope = Scope.ALL) -> int:
		idx = self.next(idx, scope)
		while idx != NULL:
			chunk = self.chunks[idx]
			if chunk.kind is kind and (level is None or chunk.level == level):
				return idx
			idx = self.next(idx, scope)
		return NULL

	def closing(self, idx: int) -> int:
		opener = self[idx]
		if opener.kind not in CLOSER:
			return NULL
		return self.next_type(idx, CLOSER[opener.kind], opener.level)

	def between(self, first: int, last: int) -> typing.Iterator[int]:
		idx = self.next(first)
		while idx != NULL and idx != last:
			yield idx
			idx = self.next(idx)

	def shift_line(self, idx: int, width: int) -> None:
		# the line's terminating newline moves too
		while idx != NULL:
			chunk = self.chunks[idx]
			chunk.column += width
			chunk.orig_col += width
			chunk.orig_col_end += width
			if chunk.is_newline():
				break
			idx = chunk.next

	def align_to_column(self, idx: int, column: int) -> None:
		delta = column - self.chunks[idx].column
		if delta == 0:
			return
		while idx != NULL and not self.chunks[idx].is_newline():
			self.chunks[idx].column += delta
			idx = self.chunks[idx].next

	def text(self) -> str:
		return ''.join(self.chunks[idx].text for idx in self)
