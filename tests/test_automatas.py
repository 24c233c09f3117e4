import unittest

from gramatica import EPSILON, Production, augment_grammar, parse_grammar
from automatas import (
    Item,
    canonical_collection,
    closure,
    collection_to_dict,
    goto,
    initial_closure,
    item_set_key,
    items_to_rows,
    transitions_to_rows,
)

ARITMETICA = """
E -> E + T | T
T -> T * F | F
F -> ( E ) | id
"""


def _grammar(texto=ARITMETICA):
    return augment_grammar(parse_grammar(texto))


class TestcaseItem(unittest.TestCase):
    def test_equality_uses_production_id_and_dot(self):
        a = Item(Production(3, "T", ("T", "*", "F")), 1)
        b = Item(Production(3, "T", ("T", "*", "F")), 1)
        self.assertEqual(a, b)
        self.assertEqual(len({a, b}), 1)
        self.assertNotEqual(a, a.advance())

    def test_epsilon_item_is_complete_at_dot_zero(self):
        item = Item(Production(2, "A", (EPSILON,)), 0)
        self.assertTrue(item.is_complete)
        self.assertIsNone(item.next_symbol)
        self.assertEqual(str(item), "A -> ·")

    def test_str_places_the_dot(self):
        item = Item(Production(1, "E", ("E", "+", "T")), 2)
        self.assertEqual(str(item), "E -> E + · T")


class TestcaseClosure(unittest.TestCase):
    def test_initial_closure(self):
        g = _grammar()
        I0 = initial_closure(g)
        self.assertEqual(item_set_key(I0), tuple((i, 0) for i in range(7)))

    def test_closure_is_idempotent(self):
        g = _grammar()
        for state in canonical_collection(g).states:
            once = closure(state.items, g)
            self.assertEqual(item_set_key(closure(once, g)), item_set_key(once))
            self.assertEqual(item_set_key(once), state.key)

    def test_closure_does_not_expand_terminals(self):
        g = _grammar()
        seed = [Item(g.productions[5], 0)]  # F -> · ( E )
        self.assertEqual(item_set_key(closure(seed, g)), ((5, 0),))

    def test_closure_adds_epsilon_items(self):
        g = _grammar("S -> a A b\nA -> epsilon | c")
        I = closure([Item(g.productions[1], 1)], g)  # S -> a · A b
        self.assertEqual(item_set_key(I), ((1, 1), (2, 0), (3, 0)))


class TestcaseGoto(unittest.TestCase):
    def test_goto_advances_and_closes(self):
        g = _grammar()
        J = goto(initial_closure(g), "(", g)
        self.assertEqual(item_set_key(J), ((1, 0), (2, 0), (3, 0), (4, 0), (5, 0), (5, 1), (6, 0)))

    def test_goto_is_deterministic(self):
        g = _grammar()
        I0 = initial_closure(g)
        for X in g.symbols():
            self.assertEqual(item_set_key(goto(I0, X, g)), item_set_key(goto(I0, X, g)))

    def test_goto_without_matching_items_is_empty(self):
        g = _grammar()
        self.assertEqual(goto(initial_closure(g), ")", g), frozenset())

    def test_epsilon_never_moves(self):
        g = _grammar("S -> a A b\nA -> epsilon | c")
        I = closure([Item(g.productions[1], 1)], g)
        self.assertEqual(goto(I, EPSILON, g), frozenset())


class TestcaseCanonicalCollection(unittest.TestCase):
    def test_arithmetic_has_twelve_states(self):
        collection = canonical_collection(_grammar())
        self.assertEqual(len(collection), 12)
        self.assertEqual(collection.initial_state, 0)
        self.assertEqual(collection[0].key, item_set_key(initial_closure(_grammar())))

    def test_states_are_unique(self):
        collection = canonical_collection(_grammar())
        keys = [state.key for state in collection.states]
        self.assertEqual(len(keys), len(set(keys)))

    def test_every_transition_matches_goto(self):
        g = _grammar()
        collection = canonical_collection(g)
        for state in collection.states:
            for X, j in state.transitions.items():
                self.assertEqual(item_set_key(goto(state.items, X, g)), collection[j].key)

    def test_transitions_follow_alphabet_order(self):
        g = _grammar()
        for state in canonical_collection(g).states:
            self.assertEqual(list(state.transitions), sorted(state.transitions))
            self.assertNotIn(EPSILON, state.transitions)

    def test_building_twice_is_identical(self):
        first = collection_to_dict(canonical_collection(_grammar()))
        second = collection_to_dict(canonical_collection(_grammar()))
        self.assertEqual(first, second)

    def test_requires_augmented_grammar(self):
        with self.assertRaises(ValueError):
            canonical_collection(parse_grammar(ARITMETICA))

    def test_rows(self):
        collection = canonical_collection(_grammar())
        rows = items_to_rows(collection[0].items)
        self.assertEqual(rows[0], {"No.": 0, "Producción": 0, "Ítem": "E' -> · E"})
        transitions = transitions_to_rows(collection)
        self.assertEqual(len(transitions), sum(len(s.transitions) for s in collection.states))


if __name__ == '__main__':
    unittest.main()
