from collections import deque
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple
import logging

from gramatica import Grammar, Production

logger = logging.getLogger(__name__)

# Clave canónica de un conjunto de ítems: pares (id de producción, punto) ordenados
ItemSetKey = Tuple[Tuple[int, int], ...]


@dataclass(frozen=True, eq=False)
class Item:
    """Ítem LR(0): `dot` símbolos del lado derecho de `production` ya reconocidos."""
    production: Production
    dot: int

    @property
    def key(self) -> Tuple[int, int]:
        return (self.production.id, self.dot)

    @property
    def is_complete(self) -> bool:
        # A -> ε con el punto en 0 ya está "al final"
        return self.production.is_epsilon or self.dot >= len(self.production.rhs)

    @property
    def next_symbol(self) -> Optional[str]:
        if self.is_complete:
            return None
        return self.production.rhs[self.dot]

    def advance(self) -> "Item":
        return Item(self.production, self.dot + 1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.production.lhs} -> {_with_dot(self)}"


ItemSet = FrozenSet[Item]


@dataclass(frozen=True)
class State:
    id: int
    items: ItemSet
    transitions: Dict[str, int]

    @property
    def key(self) -> ItemSetKey:
        return item_set_key(self.items)


@dataclass(frozen=True)
class CanonicalCollection:
    states: Tuple[State, ...]
    initial_state: int = 0

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, state_id: int) -> State:
        return self.states[state_id]


def item_set_key(items: Iterable[Item]) -> ItemSetKey:
    return tuple(sorted(item.key for item in items))


# ===============================================================
# CLOSURE LR(0)
# ===============================================================

def closure(items: Iterable[Item], grammar: Grammar) -> ItemSet:
    """CLOSURE(I): agrega B -> · γ por cada ítem con un no terminal B tras el punto."""
    result = set(items)
    pending = deque(result)
    while pending:
        item = pending.popleft()
        B = item.next_symbol
        if B is None or not grammar.is_nonterminal(B):
            continue
        for prod in grammar.productions_for(B):
            new_item = Item(prod, 0)
            if new_item not in result:
                result.add(new_item)
                pending.append(new_item)
    return frozenset(result)


# ===============================================================
# GOTO LR(0)
# ===============================================================

def goto(items: Iterable[Item], X: str, grammar: Grammar) -> ItemSet:
    """GOTO(I, X): avanza el punto sobre X y cierra. Vacío si ningún ítem espera X."""
    moved = [item.advance() for item in items if item.next_symbol == X]
    if not moved:
        return frozenset()
    return closure(moved, grammar)


# ===============================================================
# COLECCIÓN CANÓNICA
# ===============================================================

def initial_closure(grammar: Grammar) -> ItemSet:
    """I0 = CLOSURE({ S' -> · S })"""
    return closure([Item(grammar.productions[0], 0)], grammar)


def canonical_collection(grammar: Grammar) -> CanonicalCollection:
    """Construye los estados LR(0) en orden BFS; los ids dependen solo del texto de la gramática."""
    if grammar.augmented_start_symbol is None:
        raise ValueError("La colección canónica requiere una gramática aumentada")

    I0 = initial_closure(grammar)
    item_sets: List[ItemSet] = [I0]
    transitions: List[Dict[str, int]] = [{}]
    index: Dict[ItemSetKey, int] = {item_set_key(I0): 0}
    symbols = grammar.symbols()

    worklist = deque([0])
    while worklist:
        i = worklist.popleft()
        for X in symbols:
            J = goto(item_sets[i], X, grammar)
            if not J:
                continue
            key = item_set_key(J)
            j = index.get(key)
            if j is None:
                j = len(item_sets)
                index[key] = j
                item_sets.append(J)
                transitions.append({})
                worklist.append(j)
            transitions[i][X] = j

    states = tuple(State(i, I, transitions[i]) for i, I in enumerate(item_sets))
    logger.debug("Colección canónica: %d estados", len(states))
    return CanonicalCollection(states)


# ===============================================================
# REPRESENTACIÓN (TABLAS)
# ===============================================================

def _with_dot(item: Item) -> str:
    rhs = [] if item.production.is_epsilon else list(item.production.rhs)
    parts = rhs[:item.dot] + ["·"] + rhs[item.dot:]
    return " ".join(parts)


def sorted_items(items: Iterable[Item]) -> List[Item]:
    return sorted(items, key=lambda it: it.key)


def items_to_rows(items: Iterable[Item]) -> List[dict]:
    """Convierte un conjunto de ítems en filas (para tabla Streamlit)."""
    rows = []
    for idx, item in enumerate(sorted_items(items)):
        rows.append({
            "No.": idx,
            "Producción": item.production.id,
            "Ítem": str(item),
        })
    return rows


def transitions_to_rows(collection: CanonicalCollection) -> List[dict]:
    return [
        {"Desde": state.id, "Símbolo": X, "Hacia": j}
        for state in collection.states
        for X, j in state.transitions.items()
    ]


def collection_to_dict(collection: CanonicalCollection) -> Dict[str, object]:
    return {
        "initialState": collection.initial_state,
        "states": [
            {
                "id": state.id,
                "items": [list(k) for k in state.key],
                "transitions": dict(sorted(state.transitions.items())),
            }
            for state in collection.states
        ],
    }
