import io

from chunk_list import ChunkList

class Lines:
	def __init__(self, tab_size: int, indent_with_tabs: bool):
		self.current = io.StringIO()
		self.lines = [self.current]
		self.tab_size = tab_size
		self.indent_with_tabs = indent_with_tabs
		self.column = 1

	def _advance(self, s: str) -> int:
		column = self.column
		for c in s:
			if c == '\t':
				column += self.tab_size - (column - 1) % self.tab_size
			else:
				column += 1
		return column

	def write(self, column: int, s: str, whitespace: str = ''):
		if whitespace and self._advance(whitespace) == column \
				and not (self.column == 1 and self.indent_with_tabs):
			self.current.write(whitespace)
			self.column = column
		elif column > self.column:
			gap = column - self.column
			if self.column == 1 and self.indent_with_tabs:
				self.current.write('\t' * (gap // self.tab_size))
				gap %= self.tab_size
			self.current.write(' ' * gap)
			self.column = column
		self.current.write(s)
		self.column = self._advance(s)

	def new_line(self, count=1, trailing=''):
		self.current.write(trailing)
		for _ in range(count):
			self.current = io.StringIO()
			self.lines.append(self.current)
		self.column = 1

	def get_values(self) -> list[str]:
		return [sio.getvalue() for sio in self.lines]

def render(stream: ChunkList, tab_size: int = 8, indent_with_tabs: bool = False) -> str:
	lines = Lines(tab_size, indent_with_tabs)
	for idx in stream:
		chunk = stream[idx]
		if chunk.is_newline():
			lines.new_line(chunk.nl_count, chunk.whitespace)
		else:
			lines.write(chunk.column, chunk.text, chunk.whitespace)
	return '\n'.join(lines.get_values())
