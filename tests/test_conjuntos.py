import unittest

from gramatica import EPSILON, END_MARKER, augment_grammar, parse_grammar
from conjuntos import (
    analizar_gramatica,
    compute_first,
    compute_follow,
    first_of_sequence,
    iter_first_passes,
    iter_follow_passes,
)

ARITMETICA = """
E -> E + T | T
T -> T * F | F
F -> ( E ) | id
"""

# Versión sin recursión izquierda, con producciones vacías
ARITMETICA_LL = """
E -> T X
X -> + T X | epsilon
T -> F Y
Y -> * F Y | epsilon
F -> ( E ) | id
"""


class TestcaseFirst(unittest.TestCase):
    def test_arithmetic(self):
        first = compute_first(augment_grammar(parse_grammar(ARITMETICA)))
        for nt in ["E'", "E", "T", "F"]:
            self.assertEqual(first[nt], {"(", "id"})
        self.assertEqual(first["id"], {"id"})
        self.assertEqual(first[EPSILON], {EPSILON})
        self.assertEqual(first[END_MARKER], {END_MARKER})

    def test_nullable_nonterminals(self):
        first = compute_first(augment_grammar(parse_grammar(ARITMETICA_LL)))
        self.assertEqual(first["X"], {"+", EPSILON})
        self.assertEqual(first["Y"], {"*", EPSILON})
        self.assertEqual(first["E"], {"(", "id"})

    def test_nullable_chain_reaches_the_left_side(self):
        first = compute_first(parse_grammar("S -> A B c\nA -> a | epsilon\nB -> b |"))
        self.assertEqual(first["S"], {"a", "b", "c"})
        first = compute_first(parse_grammar("S -> A B\nA -> a | epsilon\nB -> b |"))
        self.assertEqual(first["S"], {"a", "b", EPSILON})

    def test_first_of_sequence(self):
        first = compute_first(parse_grammar(ARITMETICA_LL))
        self.assertEqual(first_of_sequence([], first), {EPSILON})
        self.assertEqual(first_of_sequence(["X", "Y"], first), {"+", "*", EPSILON})
        self.assertEqual(first_of_sequence(["X", ")"], first), {"+", ")"})

    def test_passes_are_monotonic_and_terminate(self):
        passes = list(iter_first_passes(augment_grammar(parse_grammar(ARITMETICA_LL))))
        self.assertGreaterEqual(len(passes), 2)
        for before, after in zip(passes, passes[1:]):
            for sym in before:
                self.assertTrue(before[sym] <= after[sym])
        self.assertEqual(passes[-1], passes[-2])


class TestcaseFollow(unittest.TestCase):
    def test_arithmetic(self):
        g = augment_grammar(parse_grammar(ARITMETICA))
        follow = compute_follow(g, compute_first(g))
        self.assertEqual(follow["E'"], {"$"})
        self.assertEqual(follow["E"], {"$", "+", ")"})
        self.assertEqual(follow["T"], {"$", "+", ")", "*"})
        self.assertEqual(follow["F"], {"$", "+", ")", "*"})

    def test_follow_through_nullable_suffix(self):
        g = augment_grammar(parse_grammar(ARITMETICA_LL))
        follow = compute_follow(g, compute_first(g))
        self.assertEqual(follow["E"], {"$", ")"})
        self.assertEqual(follow["X"], {"$", ")"})
        self.assertEqual(follow["T"], {"+", "$", ")"})
        self.assertEqual(follow["Y"], {"+", "$", ")"})
        self.assertEqual(follow["F"], {"*", "+", "$", ")"})

    def test_unaugmented_grammar_seeds_the_start_symbol(self):
        g = parse_grammar(ARITMETICA)
        follow = compute_follow(g, compute_first(g))
        self.assertIn("$", follow["E"])
        self.assertEqual(set(follow), {"E", "T", "F"})

    def test_passes_are_monotonic(self):
        g = augment_grammar(parse_grammar(ARITMETICA_LL))
        passes = list(iter_follow_passes(g, compute_first(g)))
        for before, after in zip(passes, passes[1:]):
            for nt in before:
                self.assertTrue(before[nt] <= after[nt])
        self.assertEqual(passes[-1], passes[-2])

    def test_analizar_gramatica(self):
        g, first, follow = analizar_gramatica(ARITMETICA)
        self.assertEqual(g.augmented_start_symbol, "E'")
        self.assertEqual(first["F"], {"(", "id"})
        self.assertEqual(follow["F"], {"$", "+", ")", "*"})


if __name__ == '__main__':
    unittest.main()
