from dataclasses import dataclass
from typing import List, Optional, Tuple
import logging

from gramatica import END_MARKER, Grammar, tokenize_input
from tabla import (
    Accept,
    Action,
    Conflict,
    Error,
    ParsingTable,
    Reduce,
    Shift,
    format_action,
)

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    pass


@dataclass(frozen=True)
class SimulationStep:
    state_stack: Tuple[int, ...]
    symbol_stack: Tuple[str, ...]
    remaining_input: Tuple[str, ...]
    action: Optional[Action]
    index: int

    @property
    def is_terminal(self) -> bool:
        return isinstance(self.action, (Accept, Conflict, Error))


class Simulator:
    """
    Analizador shift-reduce paso a paso sobre una ParsingTable.

    La historia solo crece: retroceder mueve el cursor, y avanzar sobre pasos
    ya calculados devuelve el mismo objeto en lugar de recalcularlo.
    """

    def __init__(self, grammar: Grammar, table: ParsingTable, texto: str,
                 initial_state: int = 0):
        tokens = tokenize_input(texto)
        if END_MARKER in tokens:
            raise InvalidInputError(f"La entrada no puede contener '{END_MARKER}'")
        self.grammar = grammar
        self.table = table
        self._history: List[SimulationStep] = [SimulationStep(
            state_stack=(initial_state,),
            symbol_stack=(END_MARKER,),
            remaining_input=tuple(tokens) + (END_MARKER,),
            action=None,
            index=0,
        )]
        self._cursor = 0

    @property
    def history(self) -> Tuple[SimulationStep, ...]:
        return tuple(self._history)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> SimulationStep:
        return self._history[self._cursor]

    @property
    def finished(self) -> bool:
        return self._history[-1].is_terminal

    @property
    def accepted(self) -> bool:
        return isinstance(self._history[-1].action, Accept)

    def step_forward(self) -> SimulationStep:
        if self._cursor < len(self._history) - 1:
            self._cursor += 1
        elif not self.finished:
            self._history.append(self._next_step(self._history[-1]))
            self._cursor += 1
        return self.current

    def step_backward(self) -> SimulationStep:
        if self._cursor > 0:
            self._cursor -= 1
        return self.current

    def reset(self) -> SimulationStep:
        self._cursor = 0
        return self.current

    def run(self, max_steps: int = 10000) -> Tuple[SimulationStep, ...]:
        """Avanza hasta un paso terminal o hasta agotar `max_steps`."""
        for _ in range(max_steps):
            if self.finished and self._cursor == len(self._history) - 1:
                break
            self.step_forward()
        logger.debug("Simulación: %d pasos, aceptada=%s", len(self._history) - 1, self.accepted)
        return self.history

    def _next_step(self, step: SimulationStep) -> SimulationStep:
        state = step.state_stack[-1]
        lookahead = step.remaining_input[0]
        actions = self.table.actions(state, lookahead)

        def halt(action: Action) -> SimulationStep:
            return SimulationStep(step.state_stack, step.symbol_stack,
                                  step.remaining_input, action, step.index + 1)

        if not actions:
            return halt(Error(f"Error sintáctico en estado {state} con lookahead '{lookahead}'"))
        if len(actions) > 1:
            return halt(Conflict(len(actions)))

        action = actions[0]
        if isinstance(action, Shift):
            return SimulationStep(
                step.state_stack + (action.state,),
                step.symbol_stack + (lookahead,),
                step.remaining_input[1:],
                action,
                step.index + 1,
            )
        if isinstance(action, Reduce):
            prod = self.grammar.production(action.production)
            k = 0 if prod.is_epsilon else len(prod.rhs)
            states = step.state_stack[:len(step.state_stack) - k]
            symbols = step.symbol_stack[:len(step.symbol_stack) - k]
            target = self.table.goto_for(states[-1], prod.lhs)
            if target is None:
                return halt(Error(f"Falta GOTO({states[-1]}, {prod.lhs}) durante la reducción"))
            return SimulationStep(
                states + (target,),
                symbols + (prod.lhs,),
                step.remaining_input,
                action,
                step.index + 1,
            )
        if isinstance(action, Accept):
            return halt(action)
        raise TypeError(f"Acción desconocida en la tabla: {action!r}")


# ===============================================================
# SIMULACIÓN COMPLETA Y REPRESENTACIÓN
# ===============================================================

def simulate(grammar: Grammar, table: ParsingTable,
             texto: str) -> Tuple[bool, Tuple[SimulationStep, ...], str]:
    """Simula hasta el final. Devuelve (aceptada, historia, detalle del error)."""
    sim = Simulator(grammar, table, texto)
    history = sim.run()
    last = history[-1].action
    if isinstance(last, Error):
        return False, history, last.reason
    if isinstance(last, Conflict):
        return False, history, f"Conflicto con {last.count} acciones; no se elige ninguna"
    return sim.accepted, history, ""


def describe_action(action: Optional[Action], grammar: Grammar) -> str:
    if action is None:
        return "inicio"
    if isinstance(action, Shift):
        return f"shift {action.state}"
    if isinstance(action, Reduce):
        return f"reduce {grammar.production(action.production)}"
    if isinstance(action, Accept):
        return "accept"
    if isinstance(action, Error):
        return action.reason or "error"
    return format_action(action)


def trace_rows(history: Tuple[SimulationStep, ...], grammar: Grammar) -> List[dict]:
    return [
        {
            "Paso": step.index,
            "Pila(estados)": " ".join(str(s) for s in step.state_stack),
            "Pila(símbolos)": " ".join(step.symbol_stack),
            "Entrada": " ".join(step.remaining_input),
            "Acción": describe_action(step.action, grammar),
        }
        for step in history
    ]
