# credativ-sp-converter
# Copyright (C) 2025 credativ GmbH
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from collections import deque

class LookaheadLineSource:
    """
    Wraps an iterable of physical lines (typically an open file) with a FIFO
    buffer, so callers can peek at upcoming lines before deciding how to
    handle the current one. Buffered lines are always handed out before a new
    physical line is read, so the original line order is preserved.
    """

    def __init__(self, lines):
        self._lines = iter(lines)
        self._buffer = deque()
        self._exhausted = False

    def _read_physical_line(self):
        if self._exhausted:
            return None
        try:
            line = next(self._lines)
        except StopIteration:
            self._exhausted = True
            return None
        return line.rstrip('\r\n')

    def _fill(self, count):
        while len(self._buffer) < count:
            line = self._read_physical_line()
            if line is None:
                break
            self._buffer.append(line)

    def read_line(self):
        """Return the next line (buffered first), or None at end of input"""
        self._fill(1)
        if not self._buffer:
            return None
        return self._buffer.popleft()

    def peek(self, count):
        """Return up to count upcoming lines without consuming them"""
        self._fill(count)
        return [self._buffer[i] for i in range(min(count, len(self._buffer)))]

    def peek_line(self, offset=0):
        lines = self.peek(offset + 1)
        if len(lines) <= offset:
            return None
        return lines[offset]

    def dequeue(self):
        return self.read_line()

if __name__ == "__main__":
    print("This script is not meant to be run directly")
