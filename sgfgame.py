#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# sgfgame.py (Smart Game Format game record reader)
# Copyright © 2000-2021 David John Goodger (goodger@python.org)
#
# This library is free software; you can redistribute it and/or modify it
# under the terms of the GNU Lesser General Public License as published by the
# Free Software Foundation; either version 2 of the License, or (at your
# option) any later version.
#
# This library is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or
# FITNESS FOR A PARTICULAR PURPOSE.  See the GNU Lesser General Public License
# for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# (lgpl.txt) along with this library; if not, write to the Free Software
# Foundation, Inc., 59 Temple Place, Suite 330, Boston, MA  02111-1307  USA
# The license is currently available on the Internet at:
#     http://www.gnu.org/copyleft/lesser.html

"""
=======================================================
 Smart Game Format Game Record Reader: sgfgame
=======================================================

version 1.0a

Description
===========

This library reads SGF, the Smart Game Format, and extracts a flat game
record of a game of Go from it. SGF is a text only, tree based file format
designed to store game records of board games for two players. (See `the
official SGF specification <https://www.red-bean.com/sgf/>`_.)

Reading happens in two steps:

1. Given a string containing a complete SGF data instance (the contents of a
   .sgf file), the `Parser` class creates a `Collection` object consisting of
   one or more `GameTree` instances, each containing a sequence of `Node`
   instances and optional branch `GameTree` objects (variations). Each `Node`
   is an ordered list of `Property` objects; each `Property` is an ordered
   list of raw value strings (backslash escapes are kept as found).

2. `Collection.select_path()` picks the deepest line of play through the
   collection, and `interpret()` turns the properties found along it into a
   `GameRecord`: board size, komi, handicap, time limit, setup stones, moves,
   result and player information. Properties that are not interpreted may be
   collected as (ID, comma-joined values) pairs.

`parse_sgf()` does both steps and raises an `Error` subclass on failure.
`simple_parse_sgf()` never raises the library's errors; it returns ``None``
and appends messages to an optional error list instead.

The default representation (using ``str()`` or ``print()``) of the parse
tree classes is the Smart Game Format itself.

In addition, `RecordCLI` prints the game records of one or more SGF files.
"""


# Revision History:
#
# * 1.0a: Game record reader, built from the sgflib parse tree classes.


import sys
import warnings
import argparse
import datetime
import re
import textwrap
import collections
import enum


TEXT_ENCODING = 'UTF-8'
"""Encoding used for reading SGF files and decoding bytestrings."""

PRETTY_INDENT_SPACES = 2
"""Per-level indent for pretty-formatted output."""

DEFAULT_KOMI = 6.5
"""Komi used when a KM property value cannot be parsed."""

RESIGN_RESULT = 1.2
"""Magnitude of `GameRecord.result` for a win by resignation, time or
forfeit. Positive means black won, negative means white won."""

PASS_POSITION = (-1, -1)
"""Position of a pass move."""


class SGFWarning(UserWarning):
    """Category for all warnings issued by sgfgame."""
    pass


class Error(Exception):
    """Base class for sgfgame exceptions."""
    pass

# Parsing Exceptions

class ParseError(Error):
    """Base class for parsing exceptions."""
    pass

class TreeParseError(ParseError):
    """Raised by `Parser.parse()`."""
    pass

class NodeParseError(ParseError):
    """Raised by `Parser.consume_node()`."""
    pass

# Path Selection Exceptions

class SelectionError(Error):
    """Raised by `Collection.select_path()`."""
    pass

# Interpretation Exceptions

class InterpretationError(Error):
    """Base class for game record interpretation exceptions."""
    pass

class PropertyValueError(InterpretationError):
    """Raised by `GameRecord.handle_property()` for bad values or arity."""
    pass

class CoordinateError(InterpretationError):
    """Raised by `parse_point()`."""
    pass

class ResultError(InterpretationError):
    """Raised by `GameRecord.handle_property()` for bad RE values."""
    pass

# Miscellaneous Exceptions

class CheckError(Error):
    """Raised by `GameRecord.check()`."""
    pass

class ReadError(Error):
    """Raised by `read_file_to_string()`."""
    pass


def find_first(text, start, targets, expect_contents):
    """
    Return the index of the first unescaped character of `text` (at or after
    `start`) that is one of `targets`, or -1 if there is none.

    A backslash escapes the character following it. If `expect_contents` is
    false, only whitespace may precede the target: any other character ends
    the search unsuccessfully.
    """
    escaping = False
    for index in range(start, len(text)):
        if escaping:
            escaping = False
            continue
        char = text[index]
        if char == '\\':
            escaping = True
        elif char in targets:
            return index
        elif not expect_contents and not char.isspace():
            return -1
    return -1


class Property(list):

    """
    An SGF property: a `list` of one or more raw value strings, with the
    property identifier in `self.id`.

    Values are stored exactly as found between the brackets, including any
    backslash escapes.
    """

    def __init__(self, pid, values=()):
        super().__init__(values)
        self.id = pid

    def __eq__(self, other):
        return super().__eq__(other) and self.id == getattr(other, 'id', None)

    def __str__(self):
        """Return an SGF representation of this `Property`."""
        return '{}[{}]'.format(self.id, ']['.join(self))

    def __repr__(self):
        return '{}({!r}, {})'.format(
            self.__class__.__name__, self.id, list.__repr__(self))


class Node(list):

    """
    An SGF node (one move or play, or initial setup): an ordered `list` of
    `Property` objects. The same property ID may occur more than once.
    """

    def __str__(self):
        """Return an SGF text representation of this `Node`."""
        return ';' + ''.join(str(prop) for prop in self)

    def pretty(self, indent=0):
        return str(self)

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, list.__repr__(self))

    def get(self, pid, default=None):
        """
        Return the last `Property` with ID `pid` (case-insensitive), or
        `default`.
        """
        pid = pid.upper()
        for prop in reversed(self):
            if prop.id.upper() == pid:
                return prop
        return default


class GameTree(list):

    """
    An SGF game tree: a sequence of `Node` objects and optional branches
    (game variations) that continue after the last node.

    Instance attributes:

    self : list of `Node`
       Game tree trunk, all plays prior to any branches.

    self.branches : list of `GameTree`
       Variations of a game, in the order found.
    """

    def __init__(self, nodelist=None, branches=None):
        if nodelist is not None:
            self.extend(nodelist)
        self.branches = [] if branches is None else branches

    def __eq__(self, other):
        return super().__eq__(other) and self.branches == other.branches

    def __str__(self):
        """Return an SGF representation of this `GameTree`."""
        parts = ['(']
        parts.extend(str(item) for item in self)
        parts.extend(str(branch) for branch in self.branches)
        parts.append(')')
        return '\n'.join(parts)

    def pretty(self, indent=0):
        """Return a pretty-formatted SGF representation of this `GameTree`."""
        indent += 1
        parts = ['(']
        parts.extend(item.pretty(indent) for item in self)
        parts.extend(branch.pretty(indent) for branch in self.branches)
        spaces = ' ' * indent * PRETTY_INDENT_SPACES
        return (
            f'\n{spaces}'.join(parts)
            + f'\n{" "*(indent-1)*PRETTY_INDENT_SPACES})')

    def __repr__(self):
        nodelist = branches = ''
        if self:
            nodelist = 'nodelist=[{}, ...], '.format(repr(self[0]))
        if self.branches:
            branches = 'branches=[{}, ...]'.format(repr(self.branches[0]))
        return '{}({}{})'.format(self.__class__.__name__, nodelist, branches)

    def furthest_leaf(self):
        """
        Return a (path, depth) tuple for the deepest leaf of this `GameTree`.

        `path` is the list of `GameTree` objects from `self` down to the leaf;
        `depth` is the total number of nodes along it. At each branching the
        deepest branch wins; ties go to the first branch.

        The tree is walked with an explicit stack, so nesting depth is not
        limited by the interpreter's recursion limit.
        """
        # id(tree) -> (depth of its furthest leaf, chosen branch or None)
        deepest = {}
        stack = [(self, False)]
        while stack:
            tree, visited = stack.pop()
            if not visited:
                stack.append((tree, True))
                stack.extend((branch, False) for branch in tree.branches)
                continue
            best_branch = None
            best_depth = 0
            for branch in tree.branches:
                depth = deepest[id(branch)][0]
                if best_branch is None or depth > best_depth:
                    best_branch, best_depth = branch, depth
            deepest[id(tree)] = (len(tree) + best_depth, best_branch)
        path = []
        tree = self
        while tree is not None:
            path.append(tree)
            tree = deepest[id(tree)][1]
        return path, deepest[id(self)][0]

    def deepest_line(self):
        """Return the list of `Node` objects along the deepest path."""
        path, depth = self.furthest_leaf()
        return [node for tree in path for node in tree]


class Collection(list):

    """
    A `Collection` is a `list` of one or more `GameTree` objects.
    """

    path = None

    def __str__(self):
        """
        SGF text representation, accessed via `str(collection)`.
        Separates game trees with a blank line.
        """
        return '\n\n'.join(str(item) for item in self)

    def pretty(self):
        """
        Pretty-formatted SGF text representation. Separates game trees with a
        blank line.
        """
        return '\n\n'.join(item.pretty() for item in self) + '\n'

    def __repr__(self):
        if not self:
            return '{}()'.format(self.__class__.__name__)
        return '{}({}, ...)'.format(self.__class__.__name__, repr(self[0]))

    @classmethod
    def load(cls, path=None, data=None, parser_class=None):
        """
        Return a `Collection` loaded from a filesystem `path` (`None` or "-"
        reads from <stdin>) or from `data`.
        """
        if data is None:
            data = read_file_to_string(path)
        if parser_class is None:
            parser_class = Parser
        collection = parser_class(data).parse()
        collection.path = path
        return collection

    def select_path(self):
        """
        Return the list of `Node` objects along the deepest line of play.

        The game trees of the collection are compared like the branches of a
        game tree: the one with the furthest leaf wins, the first one on ties.

        Raise `SelectionError` if the collection is empty.
        """
        if not self:
            raise SelectionError('An empty tree collection.')
        return GameTree(branches=list(self)).deepest_line()


def dump_trees(collection):
    """Return an indented text outline of the parse trees in `collection`."""
    lines = []

    def dump_tree(tree, level):
        indent = ' ' * level * 2
        lines.append(f'{indent}A tree at level {level}')
        for (index, node) in enumerate(tree):
            lines.append(f'{indent} Node #{index}')
            for prop in node:
                lines.append(
                    f'{indent}  Prop ID={prop.id}, Values={",".join(prop)}')
        lines.append(f'{indent}Subtrees:')
        for branch in tree.branches:
            dump_tree(branch, level + 1)

    for tree in collection:
        dump_tree(tree, 0)
    return '\n'.join(lines)


class Parser:

    """
    Parser for SGF data. Creates a tree structure based on the SGF standard
    itself. `Parser.parse()` will return a `Collection` object for the
    entire data.

    The parser is a state machine over the characters of the data. Only
    whitespace may appear between structural characters (outside property
    values); property values may contain anything, with "]" escaped by a
    backslash.
    """

    encoding = TEXT_ENCODING
    """Encoding used when the data is supplied as a bytestring."""

    def __init__(self, data):
        if isinstance(data, bytes):
            data = data.decode(self.encoding, errors='replace')

        self.data = data
        """The complete SGF data instance (`str`)."""

    def parse(self):
        """
        Parse the SGF data stored in `self.data`, and return a `Collection`.

        Raise `TreeParseError` if the data is not well-formed.
        """
        collection = Collection()
        # Open game trees, innermost last; empty at the top level.
        stack = []
        state = 'start'
        cursor = 0
        while state != 'end':
            if state == 'start':
                index = find_first(self.data, cursor, '(', False)
                if index < 0:
                    raise TreeParseError('Failed in finding a tree start.')
                self.open_tree(collection, stack)
                state = 'tree_start'
            elif state == 'tree_start':
                index = find_first(self.data, cursor, ';', False)
                if index < 0:
                    raise TreeParseError('Failed in finding a node start.')
                state = 'node_start'
            elif state == 'node_start':
                node = Node()
                stack[-1].append(node)
                try:
                    index, terminator = self.consume_node(cursor, node)
                except NodeParseError as error:
                    raise TreeParseError('Error in parsing a node.') from error
                if terminator == ')':
                    self.close_tree(stack)
                    state = 'next_tree'
                elif terminator == '(':
                    self.open_tree(collection, stack)
                    state = 'tree_start'
            else:    # state == 'next_tree'
                index = find_first(self.data, cursor, '()', False)
                if index < 0:
                    state = 'end'
                elif self.data[index] == '(':
                    self.open_tree(collection, stack)
                    state = 'tree_start'
                else:
                    self.close_tree(stack)
            cursor = index + 1
        if stack:
            raise TreeParseError('Parser ends with a bad state.')
        return collection

    def open_tree(self, collection, stack):
        """Start a new `GameTree` as a branch of the innermost open tree."""
        tree = GameTree()
        if stack:
            stack[-1].branches.append(tree)
        else:
            collection.append(tree)
        stack.append(tree)

    def close_tree(self, stack):
        if not stack:
            raise TreeParseError('Trying to go up past the root tree.')
        stack.pop()

    def consume_node(self, start, node):
        """
        Parse the properties of one node into `node`, starting at index
        `start` (just after the ";").

        Return an (index, terminator) tuple for the ";", "(" or ")" that ends
        the node. Raise `NodeParseError` if there is a problem.
        """
        data = self.data
        state = 'node_start'
        cursor = start
        prop = None
        while True:
            if state == 'node_start':
                index = find_first(data, cursor, '[;()', True)
                if index < 0:
                    raise NodeParseError('Reached the end of a node.')
                pid = data[cursor:index].strip()
                if data[index] != '[':
                    if pid:
                        raise NodeParseError(
                            f'Property "{pid}" has no value.')
                    # A node without properties (Node = ";" {Property}).
                    # Terminators are searched for here as well as "[", so
                    # "(;)" and "(;B[aa];)" are accepted.
                    return index, data[index]
                prop = Property(pid)
                node.append(prop)
                state = 'value_start'
            elif state == 'value_start':
                index = find_first(data, cursor, ']', True)
                if index < 0:
                    raise NodeParseError(
                        'Missing the end of a property value.')
                prop.append(data[cursor:index])
                state = 'next_value'
            else:    # state == 'next_value'
                index = find_first(data, cursor, '[;()', True)
                if index < 0:
                    raise NodeParseError('Missing the end of a node.')
                gap = data[cursor:index].strip()
                if data[index] == '[':
                    if gap:
                        prop = Property(gap)
                        node.append(prop)
                    state = 'value_start'
                elif gap:
                    raise NodeParseError(
                        'Non-empty contents after the end of a value.')
                else:
                    return index, data[index]
            cursor = index + 1


class Color(enum.Enum):

    """Player color."""

    BLACK = 1
    WHITE = 2

    @property
    def sgf_id(self):
        """The move property ID of this color, "B" or "W"."""
        return 'B' if self is Color.BLACK else 'W'


class GoMove(collections.namedtuple('GoMove', 'player is_pass position')):

    """
    One move: `player` (a `Color`), `is_pass` (bool), and `position`, an
    (x, y) tuple of zero-based coordinates (`PASS_POSITION` for a pass).
    """

    __slots__ = ()


def parse_point(value):
    """
    Return the zero-based (x, y) tuple for a two-letter SGF point such as
    "pd" (case-insensitive). Raise `CoordinateError` for other lengths.
    """
    lower = value.lower()
    if len(lower) != 2:
        raise CoordinateError(f'Bad coordinate: {value}')
    return (ord(lower[0]) - ord('a'), ord(lower[1]) - ord('a'))


def point_to_sgf(position):
    """Return the two-letter SGF text for an (x, y) tuple."""
    return ''.join(chr(ord('a') + coord) for coord in position)


class GameRecord:

    """
    The game information and moves of one game of Go.

    Instance attributes:

    - board_width, board_height : int -- SZ, 0 if unknown.
    - komi : float -- KM.
    - handicap : int -- HA.
    - time_limit : int -- TM, in seconds; -1 if unknown.
    - black_stones, white_stones : list of (x, y) -- AB & AW setup stones.
    - moves : list of `GoMove` -- B & W, in order of play.
    - result : float -- RE; positive if black won by that many points,
      negative if white won. For a win by resignation, time or forfeit it is
      `RESIGN_RESULT` with the winner's sign, and `resigned` is true.
    - resigned : bool
    - black_name, black_rank, white_name, white_rank, date, rule : str --
      PB or BT, BR, PW or WT, WR, DT, RU; raw SGF text.
    """

    text_properties = {
        'RU': ('rule', 'Bad rule.'),
        'PB': ('black_name', 'Bad black name value.'),
        'BT': ('black_name', 'Bad black name value.'),
        'PW': ('white_name', 'Bad white name value.'),
        'WT': ('white_name', 'Bad white name value.'),
        'BR': ('black_rank', 'Bad black rank.'),
        'WR': ('white_rank', 'Bad white rank.'),
        'DT': ('date', 'Bad date.'),
        }
    """Mapping of single-value text property ID to (attribute name, error
    message)."""

    property_handlers = {
        'SZ': 'handle_size',
        'HA': 'handle_handicap',
        'TM': 'handle_time_limit',
        'KM': 'handle_komi',
        'RE': 'handle_result',
        'AB': 'handle_setup_stones',
        'AW': 'handle_setup_stones',
        'B':  'handle_moves',
        'W':  'handle_moves',
        }
    """Mapping of property ID to the name of its handler method. Handlers
    are called with the upper-case ID and the `Property`."""

    resign_prefixes = {
        'B+R': RESIGN_RESULT, 'B+T': RESIGN_RESULT, 'B+F': RESIGN_RESULT,
        'W+R': -RESIGN_RESULT, 'W+T': -RESIGN_RESULT, 'W+F': -RESIGN_RESULT,}
    """Result value prefixes for wins by resignation, time & forfeit."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all fields to default values."""
        self.board_width = 0
        self.board_height = 0
        self.komi = 0.0
        self.handicap = 0
        self.time_limit = -1
        self.black_stones = []
        self.white_stones = []
        self.moves = []
        self.result = 0.0
        self.resigned = False
        self.black_name = ''
        self.black_rank = ''
        self.white_name = ''
        self.white_rank = ''
        self.date = ''
        self.rule = ''

    def __eq__(self, other):
        if not isinstance(other, GameRecord):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return '{}(board_width={}, board_height={}, moves=[{} moves])'.format(
            self.__class__.__name__, self.board_width, self.board_height,
            len(self.moves))

    def __str__(self):
        return self.debug_string()

    def debug_string(self):
        """Return a human-readable dump of the record."""
        lines = [
            f'Board Size: [{self.board_width}*{self.board_height}]  '
            f'Komi: {self.komi:g}  Handicap: {self.handicap}  '
            f'Time limit: {self.time_limit} seconds.',
            f'Black: {self.black_name} Rank: {self.black_rank}  '
            f'White: {self.white_name} Rank: {self.white_rank}',
            ]
        winner = 'B' if self.result > 0 else 'W'
        if self.resigned:
            margin = 'resigned'
        else:
            margin = f'+{abs(self.result):g}'
        lines.append(
            f'Date: {self.date}  Rule: {self.rule}  '
            f'Result: {winner} wins by {margin}')
        for (label, stones) in (('Black stones', self.black_stones),
                                ('White stones', self.white_stones)):
            if stones:
                lines.append(label + ': ' + ' '.join(
                    f'[{x},{y}]' for (x, y) in stones))
        lines.append('Moves:')
        lines.append(' '.join(
            f'{move.player.sgf_id} passed' if move.is_pass
            else '{}[{},{}]'.format(move.player.sgf_id, *move.position)
            for move in self.moves))
        return '\n'.join(lines)

    def handle_property(self, prop, unparsed=None):
        """
        Update the record from one `Property`. Property IDs are matched
        case-insensitively; later values of single-value fields replace
        earlier ones.

        Unrecognized properties are appended to `unparsed` (if not `None`) as
        (ID, comma-joined values) tuples.

        Raise an `InterpretationError` subclass for bad values.
        """
        pid = prop.id.upper()
        if pid in self.text_properties:
            attribute, message = self.text_properties[pid]
            setattr(self, attribute, self.single_value(prop, message))
        elif pid in self.property_handlers:
            getattr(self, self.property_handlers[pid])(pid, prop)
        elif unparsed is not None:
            unparsed.append((pid, ','.join(prop)))

    class patterns:
        """Regular expression number patterns. Only ASCII digits, signs and
        surrounding ASCII whitespace are accepted."""
        integer = re.compile(r'[ \t\n\v\f\r]*[+-]?[0-9]+[ \t\n\v\f\r]*')
        real = re.compile(
            r'[ \t\n\v\f\r]*[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)'
            r'([eE][+-]?[0-9]+)?[ \t\n\v\f\r]*')

    @staticmethod
    def single_value(prop, message):
        if len(prop) != 1:
            raise PropertyValueError(message)
        return prop[0]

    def to_integer(self, value):
        """Return `value` as an int; raise `ValueError` if it isn't one."""
        if not self.patterns.integer.fullmatch(value):
            raise ValueError(f'invalid integer: {value!r}')
        return int(value)

    def to_real(self, value):
        """Return `value` as a float; raise `ValueError` if it isn't one."""
        if not self.patterns.real.fullmatch(value):
            raise ValueError(f'invalid real number: {value!r}')
        return float(value)

    def handle_size(self, pid, prop):
        value = self.single_value(prop, 'Bad SZ property.')
        try:
            size = self.to_integer(value)
        except ValueError:
            raise PropertyValueError('Bad SZ value.') from None
        self.board_width = size
        self.board_height = size

    def handle_handicap(self, pid, prop):
        value = self.single_value(prop, 'Bad HA property.')
        try:
            self.handicap = self.to_integer(value)
        except ValueError:
            raise PropertyValueError('Bad HA value.') from None

    def handle_time_limit(self, pid, prop):
        value = self.single_value(prop, 'Bad TM property.')
        try:
            self.time_limit = self.to_integer(value)
        except ValueError:
            warnings.warn(
                f'Cannot parse TM value "{value}", using 0.', SGFWarning)
            self.time_limit = 0

    def handle_komi(self, pid, prop):
        value = self.single_value(prop, 'Bad komi (KM) property.')
        try:
            self.komi = self.to_real(value)
        except ValueError:
            warnings.warn(
                f'Cannot parse komi (KM) value "{value}", using default '
                f'value {DEFAULT_KOMI}.', SGFWarning)
            self.komi = DEFAULT_KOMI

    def handle_result(self, pid, prop):
        value = self.single_value(prop, 'Bad result (RE) property.').upper()
        if value[:3] in self.resign_prefixes:
            self.result = self.resign_prefixes[value[:3]]
            self.resigned = True
            return
        if len(value) < 3:
            raise ResultError('Bad result (RE) value: value too short.')
        try:
            score = self.to_real(value[2:])
        except ValueError:
            raise ResultError(
                'Bad result (RE) value: failed in parsing score.') from None
        if value[0] == 'B':
            self.result = score
        elif value[0] == 'W':
            self.result = -score
        else:
            raise ResultError('Bad result (RE) value: unknown color.')
        self.resigned = False

    def handle_setup_stones(self, pid, prop):
        stones = self.black_stones if pid == 'AB' else self.white_stones
        stones.extend(parse_point(value) for value in prop)

    def handle_moves(self, pid, prop):
        color = Color.BLACK if pid == 'B' else Color.WHITE
        for value in prop:
            if value:
                self.moves.append(GoMove(color, False, parse_point(value)))
            else:
                self.moves.append(GoMove(color, True, PASS_POSITION))

    def check(self, expected_board_size=0, check_has_result=False):
        """
        Raise `CheckError` if the board is not `expected_board_size` square
        (when positive), or if `check_has_result` and the result is unknown.
        """
        if expected_board_size > 0 and (
                self.board_width != expected_board_size
                or self.board_height != expected_board_size):
            raise CheckError('Unexpected board size.')
        if check_has_result and self.result == 0.0:
            raise CheckError('The game has an unknown result.')

    def to_sgf(self):
        """
        Return SGF text for the recorded fields: one root node with the game
        information and setup stones, then one node per move.
        """
        root = Node([Property('GM', ['1']), Property('FF', ['4'])])
        if self.board_width:
            root.append(Property('SZ', [str(self.board_width)]))
        root.append(Property('KM', [str(self.komi)]))
        if self.handicap:
            root.append(Property('HA', [str(self.handicap)]))
        if self.time_limit >= 0:
            root.append(Property('TM', [str(self.time_limit)]))
        for (pid, attribute) in (('RU', 'rule'),
                                 ('PB', 'black_name'), ('BR', 'black_rank'),
                                 ('PW', 'white_name'), ('WR', 'white_rank'),
                                 ('DT', 'date')):
            if getattr(self, attribute):
                root.append(Property(pid, [getattr(self, attribute)]))
        if self.resigned:
            root.append(Property('RE', ['B+R' if self.result > 0 else 'W+R']))
        elif self.result > 0:
            root.append(Property('RE', [f'B+{self.result}']))
        elif self.result < 0:
            root.append(Property('RE', [f'W+{-self.result}']))
        for (pid, stones) in (('AB', self.black_stones),
                              ('AW', self.white_stones)):
            if stones:
                root.append(Property(pid, map(point_to_sgf, stones)))
        game = GameTree([root])
        for move in self.moves:
            value = '' if move.is_pass else point_to_sgf(move.position)
            game.append(Node([Property(move.player.sgf_id, [value])]))
        return str(game)


def interpret(nodes, unparsed=None):
    """
    Return a `GameRecord` built from the properties of `nodes` (a sequence of
    `Node`), processed in order. See `GameRecord.handle_property()`.
    """
    record = GameRecord()
    for node in nodes:
        for prop in node:
            record.handle_property(prop, unparsed)
    return record


def parse_sgf(sgf, unparsed=None):
    """
    Parse SGF text `sgf` (`str` or `bytes`) and return the `GameRecord` of
    its deepest line of play. Raise an `Error` subclass on failure.
    """
    collection = Parser(sgf).parse()
    return interpret(collection.select_path(), unparsed)


def report_error(error, errors=None):
    """
    Append the messages of `error` and the errors it was raised from
    (innermost first) to the `errors` list if not `None`, and issue them as
    `SGFWarning` warnings.
    """
    messages = []
    while error is not None:
        messages.append(str(error))
        error = error.__cause__
    for message in reversed(messages):
        if errors is not None:
            errors.append(message)
        warnings.warn(f'SGF parser error: {message}', SGFWarning, stacklevel=3)


def simple_parse_sgf(sgf, unparsed=None, errors=None):
    """
    Like `parse_sgf()`, but return ``None`` on failure, after appending the
    error messages to the `errors` list (if not `None`). Any record built
    before the failure is discarded.
    """
    try:
        return parse_sgf(sgf, unparsed)
    except Error as error:
        report_error(error, errors)
        return None


def simple_parse_sgf_and_check(path, expected_board_size=0,
                               check_has_result=False, unparsed=None,
                               errors=None):
    """
    Read and parse the SGF file at `path` like `simple_parse_sgf()`, and
    check the resulting record with `GameRecord.check()`. Return the record,
    or ``None`` on any failure.
    """
    try:
        record = parse_sgf(read_file_to_string(path), unparsed)
        record.check(expected_board_size, check_has_result)
    except Error as error:
        report_error(error, errors)
        return None
    return record


def read_file_to_string(path=None):
    """
    Return the contents of the text file at `path` (`None` or "-" reads from
    <stdin>), line by line, each line followed by a newline.

    Raise `ReadError` if the file cannot be read.
    """
    try:
        if path is None or path == '-':
            lines = sys.stdin.readlines()
        else:
            with open(path, encoding=TEXT_ENCODING, errors='replace') as src:
                lines = src.readlines()
    except OSError as error:
        raise ReadError(
            f'Unable to read "{path}": {error.strerror}') from error
    return ''.join(line.rstrip('\n') + '\n' for line in lines)


class CLI:

    """
    Abstract base class that supports command-line interface tools.
    Subclasses must define:

    * An ``execute`` method that does everything and returns the exit status.

    * `argument_specs`, the CLI arguments & options specifications, used as
      the arguments to `argparse.add_argument`::

          argument_specs = (
              (# Argument name or option flags (a tuple):
               ('name',),
               # Keyword arguments (a dictionary):
               {'default': None,
                'metavar': 'NAME',
                'help': ('Name that name.')}),
              # ...
              )

    * A class docstring that will be used as the description for the CLI
      --help.
    """

    def __init__(self, settings=None, argv=None):
        """Instantiate to process the command-line arguments."""
        if settings is None:
            settings = self.process_command_line(argv)
        self.settings = settings

    @classmethod
    def main(cls, argv=None):
        """Console script entry point."""
        sys.exit(cls(argv=argv).run())

    def run(self):
        try:
            return self.execute()
        except Exception:
            print(
                '\n{}'.format(
                    datetime.datetime.now().isoformat(
                        sep=' ', timespec='seconds')),
                file=sys.stderr)
            raise

    help_option_spec = (
        ('--help', '-h',),
        {'action': 'help', 'help': 'Show this help message.'})

    @classmethod
    def process_command_line(cls, argv=None):
        """
        Return `settings`, a namespace of options & arguments to their values.

        `argv` is a list of arguments; pass `None` (the default) to use the
        command-line arguments (``sys.argv[1:]``).
        """
        parser = argparse.ArgumentParser(
            description=textwrap.dedent(cls.__doc__),
            formatter_class=argparse.RawDescriptionHelpFormatter,
            # Help option added manually (below) for consistency:
            add_help=False,)
        for names, params in cls.argument_specs:
            parser.add_argument(*names, **params)
        names, params = cls.help_option_spec
        parser.add_argument(*names, **params)
        if argv is None:
            argv = sys.argv[1:]
        settings = parser.parse_args(argv)
        return settings


class RecordCLI(CLI):

    # Command-Line Interface implementation.

    """
    Read one or more SGF (Smart Game Format) files recording Go/WeiQi/Baduk
    games, and print the game record of the deepest line of play of each:
    board size, komi, handicap, time limit, players, date, rules, result,
    setup stones and moves.

    Files that cannot be read, parsed, or that fail the optional checks are
    reported on standard error, and the exit status is 1.
    """

    def execute(self):
        status = 0
        for path in self.settings.source_files:
            print(f'==> {path} <==')
            if self.settings.dump_tree:
                try:
                    print(dump_trees(Collection.load(path)))
                except Error as error:
                    print(f'Cannot dump "{path}": {error}', file=sys.stderr)
            unparsed = [] if self.settings.unparsed else None
            errors = []
            record = simple_parse_sgf_and_check(
                path, self.settings.board_size, self.settings.check_result,
                unparsed, errors)
            if record is None:
                status = 1
                print(f'Failed to read a game record from "{path}":',
                      file=sys.stderr)
                for message in errors:
                    print(f'  {message}', file=sys.stderr)
                continue
            print(record.debug_string())
            for (pid, values) in unparsed or ():
                print(f'Unparsed property: {pid}: {values}')
        return status

    argument_specs = (
        (('source_files',),
         {'type': str,
          'nargs': '+',
          'help': 'Paths to SGF files ("-" for standard input).'}),
        (('--unparsed', '-u',),
         {'action': 'store_true',
          'default': False,
          'help': 'Also list the properties that were not interpreted.'}),
        (('--dump-tree', '-d',),
         {'action': 'store_true',
          'default': False,
          'help': 'Print an outline of the parse tree before the record.'}),
        (('--board-size', '-s',),
         {'type': int,
          'default': 0,
          'metavar': 'N',
          'help': ('Fail unless the board is N x N '
                   '(default: 0, any size).')}),
        (('--check-result', '-r',),
         {'action': 'store_true',
          'default': False,
          'help': 'Fail if the game has no known result.'}),
        )


if __name__ == '__main__':
    RecordCLI.main()
