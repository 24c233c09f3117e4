# gramatica.py
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple
import logging
import re

logger = logging.getLogger(__name__)

EPSILON = "ε"  # símbolo para epsilon
END_MARKER = "$"  # fin de entrada
EPSILON_WORDS = ("epsilon", EPSILON)


class GrammarSyntaxError(ValueError):
    """Regla mal formada. `line` es el número de línea (1-based) del texto original."""

    def __init__(self, line: int, message: str):
        self.line = line
        if line > 0:
            super().__init__(f"Error línea {line}: {message}")
        else:
            super().__init__(message)


@dataclass(frozen=True)
class Production:
    id: int
    lhs: str
    rhs: Tuple[str, ...]

    @property
    def is_epsilon(self) -> bool:
        return self.rhs == (EPSILON,)

    def __str__(self) -> str:
        return f"{self.lhs} -> {' '.join(self.rhs)}"


@dataclass(frozen=True)
class Grammar:
    productions: Tuple[Production, ...]
    terminals: FrozenSet[str]
    nonterminals: FrozenSet[str]
    start_symbol: str
    augmented_start_symbol: Optional[str] = None

    def productions_for(self, lhs: str) -> List[Production]:
        return [p for p in self.productions if p.lhs == lhs]

    def production(self, production_id: int) -> Production:
        return self.productions[production_id]

    def is_nonterminal(self, symbol: str) -> bool:
        return symbol in self.nonterminals

    def symbols(self) -> List[str]:
        """Alfabeto de transiciones (terminales ∪ no terminales, sin ε) en orden lexicográfico."""
        return sorted(self.terminals | self.nonterminals)


# ---------------------------------------------------------------------------
# PARSEO DEL TEXTO DE LA GRAMÁTICA
# ---------------------------------------------------------------------------

def _parse_alternative(alt: str, line_num: int) -> Tuple[str, ...]:
    tokens = alt.split()
    if not tokens:
        return (EPSILON,)
    prod = tuple(EPSILON if t in EPSILON_WORDS else t for t in tokens)
    if EPSILON in prod and len(prod) > 1:
        raise GrammarSyntaxError(line_num, f"'{alt.strip()}' mezcla epsilon con otros símbolos")
    if END_MARKER in prod:
        raise GrammarSyntaxError(line_num, f"'{END_MARKER}' está reservado como fin de entrada")
    return prod


def parse_grammar(texto: str) -> Grammar:
    """
    Convierte el texto `A -> x y | z` (una regla por línea) en una Grammar.

    Los no terminales son los lados izquierdos; todo lo demás (salvo ε) es terminal.
    El primer lado izquierdo es el símbolo inicial. Las producciones se numeran
    desde 0 en orden de declaración. Los errores numeran solo las líneas no vacías.
    """
    rules: List[Tuple[str, List[Tuple[str, ...]]]] = []
    no_terminales: List[str] = []
    start_symbol = ""

    lineas = [raw.strip() for raw in texto.splitlines() if raw.strip()]
    for line_num, linea in enumerate(lineas, start=1):
        if linea.count("->") != 1:
            raise GrammarSyntaxError(line_num, "Cada producción debe contener exactamente un '->'")

        izquierda, derecha = linea.split("->")
        izquierda = izquierda.strip()
        if not izquierda or re.search(r"\s", izquierda):
            raise GrammarSyntaxError(line_num, "El lado izquierdo debe ser un único no terminal")
        if izquierda in EPSILON_WORDS or izquierda == END_MARKER:
            raise GrammarSyntaxError(line_num, f"'{izquierda}' no puede ser un no terminal")

        if not start_symbol:
            start_symbol = izquierda
        if izquierda not in no_terminales:
            no_terminales.append(izquierda)

        # Soportamos alternativas con '|'
        alternativas = [_parse_alternative(alt, line_num) for alt in derecha.split("|")]
        rules.append((izquierda, alternativas))

    if not start_symbol:
        raise GrammarSyntaxError(0, "La gramática está vacía")

    productions: List[Production] = []
    for lhs, alternativas in rules:
        for rhs in alternativas:
            productions.append(Production(len(productions), lhs, rhs))

    # Los terminales se derivan: todo símbolo del lado derecho que no sea NT ni ε
    terminales = {
        s for p in productions for s in p.rhs
        if s != EPSILON and s not in no_terminales
    }

    logger.debug("Gramática parseada: %d producciones, %d terminales",
                 len(productions), len(terminales))
    return Grammar(
        productions=tuple(productions),
        terminals=frozenset(terminales),
        nonterminals=frozenset(no_terminales),
        start_symbol=start_symbol,
    )


def augment_grammar(grammar: Grammar) -> Grammar:
    """Crea S' -> S como producción 0 y renumera el resto desde 1. No modifica `grammar`."""
    used = grammar.terminals | grammar.nonterminals
    new_start = grammar.start_symbol + "'"
    while new_start in used:
        new_start += "'"

    productions = [Production(0, new_start, (grammar.start_symbol,))]
    for p in grammar.productions:
        productions.append(Production(len(productions), p.lhs, p.rhs))

    return Grammar(
        productions=tuple(productions),
        terminals=grammar.terminals,
        nonterminals=grammar.nonterminals | {new_start},
        start_symbol=grammar.start_symbol,
        augmented_start_symbol=new_start,
    )


def grammar_to_dict(grammar: Grammar) -> Dict[str, object]:
    return {
        "productions": [
            {"id": p.id, "lhs": p.lhs, "rhs": list(p.rhs)} for p in grammar.productions
        ],
        "terminals": sorted(grammar.terminals),
        "nonterminals": sorted(grammar.nonterminals),
        "startSymbol": grammar.start_symbol,
        "augmentedStartSymbol": grammar.augmented_start_symbol,
    }


# ---------------------------------------------------------------------------
# TOKENIZACIÓN DE ENTRADA
# ---------------------------------------------------------------------------

def limpiar_texto(texto: str) -> str:
    return texto.strip()


def tokenize_input(texto: str) -> List[str]:
    # Separa por espacios y limpia
    return [t for t in re.split(r"\s+", texto.strip()) if t]
