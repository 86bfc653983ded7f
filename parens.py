import logging

from chunk_list import COPY_FLAGS, NULL, OPENERS, PAREN_OPENERS, Chunk, ChunkFlag, ChunkList, Scope, TokenKind
from config import Config

logger = logging.getLogger(__name__)

BOUNDARY_KINDS = frozenset((TokenKind.BOOL, TokenKind.QUESTION, TokenKind.COND_COLON, TokenKind.COMMA))
CONDITION_OWNERS = frozenset((TokenKind.IF, TokenKind.ELSEIF, TokenKind.SWITCH))
SKIPPED_OPENERS = OPENERS - PAREN_OPENERS

class ParenInserter:
	"""Makes comparison grouping explicit inside boolean conditions, assigned values and returns.

	Only very simple patterns are handled:
	  (!a && b)         => (!a && b)
	  (a && b == 1)     => (a && (b == 1))
	  (a == 1 || b > 2) => ((a == 1) || (b > 2))
	"""

	def __init__(self, stream: ChunkList, config: Config) -> None:
		self.stream = stream
		self.config = config
		self.inserted = 0

	def enabled(self) -> bool:
		if self.stream.language in self.config.paren_exclude_langs:
			logger.debug('parenthesis insertion disabled for %s', self.stream.language)
			return False
		return True

	def run(self) -> int:
		if not self.enabled():
			return 0
		if self.config.paren_if_bool:
			self.do_parens()
		if self.config.paren_assign_bool:
			self.do_parens_assign()
		if self.config.paren_return_bool:
			self.do_parens_return()
		logger.debug('inserted %d parenthesis pair(s)', self.inserted)
		return self.inserted

	def do_parens(self) -> None:
		if not self.enabled():
			return
		pc = self.stream.head
		while pc != NULL:
			chunk = self.stream[pc]
			if chunk.kind is TokenKind.SPAREN_OPEN and chunk.parent in CONDITION_OWNERS:
				pclose = self.stream.next_type(pc, TokenKind.SPAREN_CLOSE, chunk.level, Scope.PREPROC)
				if pclose != NULL:
					self.check_bool_parens(pc, pclose, 0)
					pc = pclose
			pc = self.stream.next_nc_nnl(pc)

	def do_parens_assign(self) -> None:
		self._do_statement_parens(TokenKind.ASSIGN)

	def do_parens_return(self) -> None:
		self._do_statement_parens(TokenKind.RETURN)

	def _do_statement_parens(self, kind: TokenKind) -> None:
		if not self.enabled():
			return
		pc = self.stream.head
		while pc != NULL:
			chunk = self.stream[pc]
			if chunk.kind is kind:
				owner = self._statement_owner(pc)
				if self.stream[owner].parent is TokenKind.WHILE:
					logger.debug('skip %r in while condition at line %d', chunk.text, chunk.orig_line)
				else:
					semicolon = self.stream.next_type(pc, TokenKind.SEMICOLON, chunk.level, Scope.PREPROC)
					if semicolon != NULL:
						self.check_bool_parens(pc, semicolon, 0)
						pc = semicolon
			pc = self.stream.next_nc_nnl(pc)

	def _statement_owner(self, pc: int) -> int:
		# walk back to the statement start or an enclosing statement paren
		if ChunkFlag.STMT_START in self.stream[pc].flags:
			return pc
		check_level = self.stream[pc].level
		p = self.stream.prev_nc(pc, Scope.PREPROC)
		while p != NULL:
			chunk = self.stream[p]
			if ChunkFlag.STMT_START in chunk.flags:
				break
			if chunk.kind is TokenKind.PAREN_OPEN:
				check_level -= 1
			if chunk.kind is TokenKind.SPAREN_OPEN:
				break
			p = self.stream.prev_nc(p, Scope.PREPROC)
			if self.stream[p].level < check_level - 1:
				break
		return p

	def preproc_in(self, popen: int, pclose: int) -> int:
		for idx in self.stream.between(popen, pclose):
			if self.stream[idx].in_preproc():
				return idx
		return NULL

	def check_bool_parens(self, popen: int, pclose: int, nest: int) -> None:
		ref = popen
		hit_compare = False
		logger.debug('nest %d: scanning %r at line %d col %d to %r at line %d col %d',
				nest, self.stream[popen].text, self.stream[popen].orig_line, self.stream[popen].orig_col,
				self.stream[pclose].text, self.stream[pclose].orig_line, self.stream[pclose].orig_col)

		# the whole region is left alone, nested parens included
		guard = self.preproc_in(popen, pclose)
		if guard != NULL:
			logger.debug('bail on preprocessor %r at line %d', self.stream[guard].text, self.stream[guard].orig_line)
			return

		pc = self.stream.next_nc_nnl(popen)
		while pc != NULL and pc != pclose:
			chunk = self.stream[pc]
			if chunk.kind in BOUNDARY_KINDS:
				if hit_compare:
					hit_compare = False
					self.add_parens_between(ref, pc)
				ref = pc
			elif chunk.kind is TokenKind.COMPARE:
				hit_compare = True
			elif chunk.kind in PAREN_OPENERS:
				close = self.stream.closing(pc)
				if close != NULL:
					self.check_bool_parens(pc, close, nest + 1)
					pc = close
			elif chunk.kind is TokenKind.SEMICOLON:
				# never wrap across statements
				ref = pc
				hit_compare = False
			elif chunk.kind in SKIPPED_OPENERS:
				pc = self.stream.closing(pc)
				if pc == NULL:
					break
			pc = self.stream.next_nc_nnl(pc)

		if hit_compare and ref != popen:
			self.add_parens_between(ref, pclose)

	def add_parens_between(self, first: int, last: int) -> None:
		"""Add an open parenthesis after first and a close parenthesis before last."""
		first_n = self.stream.next_nc_nnl(first)
		if first_n == last:
			return
		self.inserted += 1
		after = self.stream[first_n]
		logger.debug('line %d: parenthesize between %r and %r',
				after.orig_line, self.stream[first].text, self.stream[last].text)

		popen = self.stream.add_before(first_n, Chunk(TokenKind.PAREN_OPEN, '(',
			orig_line=after.orig_line, orig_col=after.orig_col, orig_col_end=after.orig_col + 1,
			column=after.column, level=after.level, brace_level=after.brace_level,
			pp_level=after.pp_level, flags=after.flags & COPY_FLAGS))
		self.stream.shift_line(first_n, 1)

		last_prev = self.stream.prev_nc_nnl(last, Scope.PREPROC)
		before = self.stream[last_prev]
		pclose = self.stream.add_after(last_prev, Chunk(TokenKind.PAREN_CLOSE, ')',
			orig_line=before.orig_line, orig_col=before.orig_col_end, orig_col_end=before.orig_col_end + 1,
			column=before.column + before.width, level=before.level, brace_level=before.brace_level,
			pp_level=before.pp_level, flags=before.flags & COPY_FLAGS))
		self.stream.shift_line(self.stream.next(pclose), 1)

		for idx in self.stream.between(popen, pclose):
			self.stream[idx].level += 1
