import logging
import typing

from chunk_list import ChunkList, TokenKind

logger = logging.getLogger(__name__)

class AlignStack:
	"""Collects rows whose anchor chunks should share a column and applies it on end().

	Rows more than thresh columns away from the pending set are skipped and retried
	as a fresh set once the pending one is applied. A pending set is applied early
	once more than span lines pass without a new row.
	"""

	def __init__(self, stream: ChunkList) -> None:
		self.stream = stream
		self.span = 0
		self.thresh = 0
		self.tab_stop = 0
		self.right_align = False
		self.aligned: list[tuple[int, int]] = []
		self.skipped: list[tuple[int, int]] = []
		self.seqnum = 0
		self.nl_seqnum = 0
		self.min_col = 0
		self.max_col = 0

	def start(self, span: int, thresh: int, tab_stop: int = 0) -> None:
		self.span = span
		self.thresh = thresh
		self.tab_stop = tab_stop
		self.right_align = False
		self.aligned = []
		self.skipped = []
		self.seqnum = 0
		self.nl_seqnum = 0
		self._reset_columns()

	def _reset_columns(self) -> None:
		self.min_col = 0
		self.max_col = 0

	def add(self, idx: int, seqnum: typing.Optional[int] = None) -> None:
		if seqnum is None:
			seqnum = self.seqnum
		col = self.stream[idx].column
		if self.thresh > 0 and self.aligned \
				and (col > self.max_col + self.thresh or col + self.thresh < self.min_col):
			logger.debug('skip %r: column %d outside %d..%d (thresh %d)',
					self.stream[idx].text, col, self.min_col, self.max_col, self.thresh)
			self.skipped.append((idx, seqnum))
			return
		self.nl_seqnum = max(self.nl_seqnum, seqnum)
		if not self.aligned:
			self.min_col = self.max_col = col
		else:
			self.min_col = min(self.min_col, col)
			self.max_col = max(self.max_col, col)
		self.aligned.append((idx, seqnum))

	def new_lines(self, count: int) -> None:
		if not self.aligned:
			return
		self.seqnum += count
		if self.seqnum > self.nl_seqnum + self.span:
			logger.debug('span %d exceeded, applying %d row(s)', self.span, len(self.aligned))
			self._apply()
			self._readd_skipped()

	def flush(self) -> None:
		self.aligned = []
		self.skipped = []
		self._reset_columns()

	def end(self) -> None:
		self._apply()
		while self.skipped:
			self._readd_skipped()
			self._apply()

	def _readd_skipped(self) -> None:
		if not self.skipped:
			return
		rows, self.skipped = self.skipped, []
		for idx, seqnum in rows:
			self.add(idx, seqnum)
		self.new_lines(0)

	def _end_column(self, idx: int) -> int:
		# a sign anchor ends with the literal it prefixes
		chunk = self.stream[idx]
		if chunk.kind in (TokenKind.NEG, TokenKind.POS):
			literal = self.stream[self.stream.next(idx)]
			if literal.kind in (TokenKind.NUMBER, TokenKind.NUMBER_FP):
				return literal.column + literal.width
		return chunk.column + chunk.width

	def _apply(self) -> None:
		rows, self.aligned = self.aligned, []
		self._reset_columns()
		if len(rows) < 2:
			return
		if self.right_align:
			end_col = max(self._end_column(idx) for idx, _ in rows)
			for idx, _ in rows:
				chunk = self.stream[idx]
				self.stream.align_to_column(idx, chunk.column + end_col - self._end_column(idx))
			logger.debug('right aligned %d row(s) to end column %d', len(rows), end_col)
			return
		col = max(self.stream[idx].column for idx, _ in rows)
		if self.tab_stop > 0:
			col = ((col - 1 + self.tab_stop - 1) // self.tab_stop) * self.tab_stop + 1
		for idx, _ in rows:
			self.stream.align_to_column(idx, col)
		logger.debug('aligned %d row(s) to column %d', len(rows), col)
