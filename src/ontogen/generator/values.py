"""Random names and values for generated graphs.

Labels and keyspace names are drawn from a small pool of metasyntactic
words. The pool is small on purpose: label collisions across concept
families are a useful source of rejections for the graph under test.
"""

from __future__ import annotations

import random
import string

from ontogen.graph import DataType, Label, MetaLabel

METASYNTACTIC = (
    "foo",
    "bar",
    "baz",
    "qux",
    "quux",
    "corge",
    "grault",
    "garply",
    "waldo",
    "fred",
    "plugh",
    "xyzzy",
    "thud",
)

# Chance that a type label joins two words with a dash
COMPOUND_LABEL_PROB = 0.3


class ValueSources:
    """Default generators for keyspaces, labels, data types and values.

    Subclass and override single methods to steer a generation in tests.
    """

    def metasyntactic(self, rng: random.Random) -> str:
        return rng.choice(METASYNTACTIC)

    def keyspace(self, rng: random.Random) -> str:
        return self.metasyntactic(rng)

    def type_label(self, rng: random.Random) -> Label:
        """Return a label that never clashes with a built-in concept."""
        while True:
            name = self.metasyntactic(rng)
            if rng.random() < COMPOUND_LABEL_PROB:
                name = f"{name}-{self.metasyntactic(rng)}"
            if name not in MetaLabel.ALL:
                return Label(name)

    def data_type(self, rng: random.Random) -> DataType:
        return rng.choice(list(DataType))

    def resource_value(self, rng: random.Random, data_type: DataType | None) -> object:
        """Return a value of *data_type*, or of a random one when None."""
        if data_type is None:
            data_type = self.data_type(rng)
        if data_type is DataType.STRING:
            length = rng.randint(0, 8)
            return "".join(rng.choice(string.ascii_letters + " -") for _ in range(length))
        if data_type is DataType.LONG:
            return rng.randint(-1000, 1000)
        if data_type is DataType.DOUBLE:
            return round(rng.uniform(-1000.0, 1000.0), 3)
        return rng.random() < 0.5

    def boolean(self, rng: random.Random) -> bool:
        return rng.random() < 0.5
