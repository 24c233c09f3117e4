from typing import Dict, FrozenSet, Iterator, Sequence, Set, Tuple
import logging

from gramatica import EPSILON, END_MARKER, Grammar, parse_grammar, augment_grammar

__all__ = [
    "compute_first",
    "compute_follow",
    "first_of_sequence",
    "iter_first_passes",
    "iter_follow_passes",
    "analizar_gramatica",
]

logger = logging.getLogger(__name__)

SymbolSets = Dict[str, Set[str]]


def _snapshot(sets: SymbolSets) -> Dict[str, FrozenSet[str]]:
    return {sym: frozenset(vals) for sym, vals in sets.items()}


# ---------------------------------------------------------------------------
# FIRST
# ---------------------------------------------------------------------------

def iter_first_passes(grammar: Grammar) -> Iterator[Dict[str, FrozenSet[str]]]:
    """Genera una instantánea de FIRST tras cada pasada del punto fijo (la última es la estable)."""
    # Inicialización: FIRST(a) = {a}, FIRST(ε) = {ε}, FIRST($) = {$}, FIRST(A) = ∅
    first: SymbolSets = {t: {t} for t in grammar.terminals}
    first[EPSILON] = {EPSILON}
    first[END_MARKER] = {END_MARKER}
    for A in grammar.nonterminals:
        first[A] = set()

    changed = True
    while changed:
        changed = False
        # Para cada A → X1 X2 … Xn
        for prod in grammar.productions:
            first_a = first[prod.lhs]
            before_size = len(first_a)

            nullable_prefix = True
            for X in prod.rhs:
                FX = first[X]
                first_a.update(FX - {EPSILON})
                if EPSILON not in FX:
                    nullable_prefix = False
                    break
            if nullable_prefix:
                first_a.add(EPSILON)

            if len(first_a) > before_size:
                changed = True
        yield _snapshot(first)


def compute_first(grammar: Grammar) -> Dict[str, FrozenSet[str]]:
    first: Dict[str, FrozenSet[str]] = {}
    passes = 0
    for first in iter_first_passes(grammar):
        passes += 1
    logger.debug("FIRST estable tras %d pasadas", passes)
    return first


def first_of_sequence(seq: Sequence[str],
                      first: Dict[str, FrozenSet[str]]) -> Set[str]:
    """FIRST(α) para una secuencia α; α vacía → {ε}."""
    acc: Set[str] = set()
    for s in seq:
        Fs = first[s]
        acc |= (Fs - {EPSILON})
        if EPSILON not in Fs:
            return acc
    acc.add(EPSILON)
    return acc


# ---------------------------------------------------------------------------
# FOLLOW
# ---------------------------------------------------------------------------

def iter_follow_passes(grammar: Grammar,
                       first: Dict[str, FrozenSet[str]]) -> Iterator[Dict[str, FrozenSet[str]]]:
    follow: SymbolSets = {A: set() for A in grammar.nonterminals}
    # Regla 3: $ en FOLLOW(S') (o FOLLOW(S) si la gramática no está aumentada)
    follow[grammar.augmented_start_symbol or grammar.start_symbol].add(END_MARKER)

    changed = True
    while changed:
        changed = False
        for prod in grammar.productions:
            for i, B in enumerate(prod.rhs):
                if B not in follow:
                    continue
                before_size = len(follow[B])

                # Regla 1: FIRST(β) - {ε} ⊆ FOLLOW(B), β = lo que sigue a B
                first_beta = first_of_sequence(prod.rhs[i + 1:], first)
                follow[B] |= (first_beta - {EPSILON})

                # Regla 2: si β es vacía o anulable → FOLLOW(A) ⊆ FOLLOW(B)
                if EPSILON in first_beta:
                    follow[B] |= follow[prod.lhs]

                if len(follow[B]) > before_size:
                    changed = True
        yield _snapshot(follow)


def compute_follow(grammar: Grammar,
                   first: Dict[str, FrozenSet[str]]) -> Dict[str, FrozenSet[str]]:
    follow: Dict[str, FrozenSet[str]] = {}
    for follow in iter_follow_passes(grammar, first):
        pass
    return follow


# ---------------------------------------------------------------------------
# Front-end "puro" para la app (sin Streamlit)
# ---------------------------------------------------------------------------

def analizar_gramatica(texto: str) -> Tuple[Grammar, Dict[str, FrozenSet[str]], Dict[str, FrozenSet[str]]]:
    """Parsea, aumenta y calcula FIRST/FOLLOW. Propaga GrammarSyntaxError."""
    g_aug = augment_grammar(parse_grammar(texto))
    first = compute_first(g_aug)
    follow = compute_follow(g_aug, first)
    return g_aug, first, follow
