import dataclasses
import logging
import typing

from align_stack import AlignStack
from chunk_list import NULL, ChunkList, TokenKind
from config import Config

logger = logging.getLogger(__name__)

NUMERIC_KINDS = frozenset((TokenKind.NUMBER, TokenKind.NUMBER_FP, TokenKind.POS, TokenKind.NEG))

def param_anchors(stream: ChunkList, call: int) -> list[int]:
	"""Return the first chunk of each top-level argument of a call, stopping at the end of its line."""
	anchors = []
	level = stream[call].level
	pc = stream.next_type(call, TokenKind.FPAREN_OPEN, level)
	if pc == NULL:
		return anchors
	at_arg_start = True
	pc = stream.next(pc)
	while pc != NULL:
		chunk = stream[pc]
		if chunk.is_newline() or chunk.kind is TokenKind.SEMICOLON \
				or (chunk.kind is TokenKind.FPAREN_CLOSE and chunk.level == level):
			break
		if chunk.level == level + 1:
			if at_arg_start:
				anchors.append(pc)
				at_arg_start = False
			elif chunk.kind is TokenKind.COMMA:
				at_arg_start = True
		pc = stream.next(pc)
	return anchors

@dataclasses.dataclass
class CallGroup:
	root: int
	name: str
	level: int
	brace_level: int
	count: int = 1

class FuncCallAligner:
	def __init__(self, stream: ChunkList, config: Config) -> None:
		self.stream = stream
		self.span = config.align_span if config.align_span > 0 else 3
		self.thresh = config.align_thresh
		self.number_right = config.align_number_right
		self.tab_stop = config.output_tab_size if config.align_on_tabstop else 0
		self.group: typing.Optional[CallGroup] = None
		self.fcn_as = AlignStack(stream)
		self.arg_stacks: list[AlignStack] = []

	def run(self) -> None:
		self.fcn_as.start(self.span, self.thresh)
		logger.debug('aligning same-function calls, span %d, thresh %d', self.span, self.thresh)
		for pc in self.stream:
			chunk = self.stream[pc]
			if chunk.kind is not TokenKind.FUNC_CALL:
				if chunk.is_newline():
					for stack in self.arg_stacks:
						stack.new_lines(chunk.nl_count)
					self.fcn_as.new_lines(chunk.nl_count)
				elif self.group is not None and self.group.brace_level > chunk.brace_level:
					logger.debug('left brace level %d at line %d, ending group of %d call(s)',
							self.group.brace_level, chunk.orig_line, self.group.count)
					self._end_group()
				continue
			self._candidate(pc)

		if self.group is not None and self.group.count > 1:
			logger.debug('end of file, ending group of %d call(s)', self.group.count)
			self._end_group()
		else:
			self.fcn_as.flush()
			for stack in self.arg_stacks:
				stack.flush()
			self.arg_stacks = []
			self.group = None

	def _left_edge(self, call: int) -> int:
		prev = self.stream.prev(call)
		while self.stream[prev].kind in (TokenKind.MEMBER, TokenKind.DC_MEMBER):
			operand = self.stream.prev(prev)
			if self.stream[operand].kind is not TokenKind.TYPE:
				prev = operand
				break
			prev = self.stream.prev(operand)
		if not self.stream[prev].is_newline():
			return NULL
		return self.stream.next(prev)

	def _candidate(self, call: int) -> None:
		edge = self._left_edge(call)
		if edge == NULL:
			return
		name = ''
		idx = edge
		while idx != call:
			name += self.stream[idx].text
			idx = self.stream.next(idx)
		name += self.stream[call].text
		chunk = self.stream[call]
		edge_chunk = self.stream[edge]

		if self.group is not None:
			if self.group.brace_level == chunk.brace_level and self.group.level == chunk.level \
					and name == self.group.name:
				self.group.count += 1
				logger.debug('add %s at line %d to group (%d)', name, chunk.orig_line, self.group.count)
				self._add_row(call)
				return
			logger.debug('%s at line %d ends group of %d call(s) to %s',
					name, chunk.orig_line, self.group.count, self.group.name)
			self._end_group()

		self.group = CallGroup(edge, name, edge_chunk.level, edge_chunk.brace_level)
		logger.debug('start group with %s at line %d', name, chunk.orig_line)
		self._add_row(call)

	def _add_row(self, call: int) -> None:
		self.fcn_as.add(call)
		anchors = param_anchors(self.stream, call)
		for pos, anchor in enumerate(anchors):
			if pos >= len(self.arg_stacks):
				stack = AlignStack(self.stream)
				stack.start(self.span, self.thresh, self.tab_stop)
				if self.stream[anchor].kind in NUMERIC_KINDS:
					stack.right_align = self.number_right or self.tab_stop == 0
				self.arg_stacks.append(stack)
			self.arg_stacks[pos].add(anchor)

	def _end_group(self) -> None:
		self.fcn_as.end()
		for stack in self.arg_stacks:
			stack.end()
		self.arg_stacks = []
		self.group = None
