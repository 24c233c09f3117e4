from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple, Union
import logging

from gramatica import END_MARKER, Grammar
from conjuntos import compute_first, compute_follow
from automatas import CanonicalCollection, sorted_items

logger = logging.getLogger(__name__)


class TableMode(Enum):
    LR0 = "LR0"
    SLR1 = "SLR1"

    @classmethod
    def parse(cls, texto: str) -> "TableMode":
        normalized = texto.strip().upper().replace("(", "").replace(")", "")
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ValueError(f"Modo de tabla desconocido: {texto!r} (se espera LR0 o SLR1)")


# ---------------------------------------------------------------------------
# ACCIONES
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Shift:
    state: int


@dataclass(frozen=True)
class Reduce:
    production: int


@dataclass(frozen=True)
class Accept:
    pass


# Resultados que solo aparecen durante la simulación
@dataclass(frozen=True)
class Conflict:
    count: int


@dataclass(frozen=True)
class Error:
    reason: str = ""


TableAction = Union[Shift, Reduce, Accept]
Action = Union[Shift, Reduce, Accept, Conflict, Error]


def format_action(action: Action) -> str:
    if isinstance(action, Shift):
        return f"s{action.state}"
    if isinstance(action, Reduce):
        return f"r{action.production}"
    if isinstance(action, Accept):
        return "acc"
    if isinstance(action, Conflict):
        return f"conflicto ({action.count})"
    if isinstance(action, Error):
        return "error"
    raise TypeError(f"Acción desconocida: {action!r}")


def action_to_dict(action: TableAction) -> Dict[str, object]:
    if isinstance(action, Shift):
        return {"type": "SHIFT", "payload": action.state}
    if isinstance(action, Reduce):
        return {"type": "REDUCE", "payload": action.production}
    if isinstance(action, Accept):
        return {"type": "ACCEPT"}
    raise TypeError(f"Acción desconocida: {action!r}")


SHIFT_REDUCE = "shift/reduce"
REDUCE_REDUCE = "reduce/reduce"
ACCEPT_REDUCE = "accept/reduce"


@dataclass(frozen=True)
class TableConflict:
    state: int
    symbol: str
    kind: str
    actions: Tuple[TableAction, ...]

    def __str__(self) -> str:
        acts = " / ".join(format_action(a) for a in self.actions)
        return f"Conflicto {self.kind} en estado {self.state} con símbolo {self.symbol}: {acts}"


# ---------------------------------------------------------------------------
# TABLA ACTION / GOTO
# ---------------------------------------------------------------------------

@dataclass
class ParsingTable:
    mode: TableMode
    terminals: Tuple[str, ...]
    nonterminals: Tuple[str, ...]
    action: Dict[int, Dict[str, List[TableAction]]] = field(default_factory=dict)
    goto: Dict[int, Dict[str, int]] = field(default_factory=dict)

    def actions(self, state: int, symbol: str) -> Tuple[TableAction, ...]:
        return tuple(self.action.get(state, {}).get(symbol, ()))

    def goto_for(self, state: int, nonterminal: str) -> Optional[int]:
        return self.goto.get(state, {}).get(nonterminal)

    def add_action(self, state: int, symbol: str, action: TableAction) -> None:
        # Misma acción (tipo y carga) ya presente: no se duplica
        cell = self.action.setdefault(state, {}).setdefault(symbol, [])
        if action not in cell:
            cell.append(action)

    def conflicts(self) -> List[TableConflict]:
        found = []
        for state in sorted(self.action):
            for symbol in sorted(self.action[state]):
                acts = self.action[state][symbol]
                if len(acts) < 2:
                    continue
                reduces = sum(1 for a in acts if isinstance(a, Reduce))
                if any(isinstance(a, Shift) for a in acts):
                    kind = SHIFT_REDUCE
                elif reduces >= 2:
                    kind = REDUCE_REDUCE
                else:
                    kind = ACCEPT_REDUCE
                found.append(TableConflict(state, symbol, kind, tuple(acts)))
        return found


def build_parsing_table(grammar: Grammar,
                        collection: CanonicalCollection,
                        mode: TableMode = TableMode.SLR1) -> ParsingTable:
    """Construye ACTION/GOTO. Los conflictos quedan registrados en la celda, no se resuelven."""
    follow: Optional[Dict[str, FrozenSet[str]]] = None
    if mode is TableMode.SLR1:
        follow = compute_follow(grammar, compute_first(grammar))

    lookaheads = tuple(sorted(grammar.terminals)) + (END_MARKER,)
    table = ParsingTable(
        mode=mode,
        terminals=lookaheads,
        nonterminals=tuple(sorted(grammar.nonterminals - {grammar.augmented_start_symbol})),
    )

    for state in collection.states:
        table.action[state.id] = {}
        table.goto[state.id] = {}

        # SHIFT sobre terminales, GOTO sobre no terminales
        for X, j in state.transitions.items():
            if grammar.is_nonterminal(X):
                table.goto[state.id][X] = j
            else:
                table.add_action(state.id, X, Shift(j))

        # REDUCE / ACCEPT para ítems completos
        for item in sorted_items(state.items):
            if not item.is_complete:
                continue
            A = item.production.lhs
            if A == grammar.augmented_start_symbol:
                table.add_action(state.id, END_MARKER, Accept())
                continue
            if follow is None:
                # LR(0): reduce sin mirar el lookahead
                targets = lookaheads
            else:
                targets = tuple(sorted(follow[A]))
            for a in targets:
                table.add_action(state.id, a, Reduce(item.production.id))

    conflicts = table.conflicts()
    if conflicts:
        logger.warning("Tabla %s con %d conflicto(s)", mode.value, len(conflicts))
    logger.debug("Tabla %s: %d estados", mode.value, len(collection))
    return table


# ---------------------------------------------------------------------------
# REPRESENTACIÓN
# ---------------------------------------------------------------------------

def action_rows(table: ParsingTable) -> List[dict]:
    """Una fila por estado, una columna por terminal (incluido $)."""
    rows = []
    for state in sorted(table.action):
        row: Dict[str, object] = {"Estado": state}
        for a in table.terminals:
            row[a] = " / ".join(format_action(act) for act in table.actions(state, a))
        rows.append(row)
    return rows


def goto_rows(table: ParsingTable) -> List[dict]:
    rows = []
    for state in sorted(table.goto):
        row: Dict[str, object] = {"Estado": state}
        for A in table.nonterminals:
            j = table.goto_for(state, A)
            row[A] = "" if j is None else str(j)
        rows.append(row)
    return rows


def table_to_dict(table: ParsingTable) -> Dict[str, object]:
    return {
        "mode": table.mode.value,
        "action": {
            str(state): {
                symbol: [action_to_dict(a) for a in acts]
                for symbol, acts in sorted(cells.items())
            }
            for state, cells in sorted(table.action.items())
        },
        "goto": {
            str(state): dict(sorted(cells.items()))
            for state, cells in sorted(table.goto.items())
        },
    }
