# sesion.py
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional
import json
import logging
import os

from gramatica import Grammar, augment_grammar, grammar_to_dict, parse_grammar
from automatas import CanonicalCollection, canonical_collection, collection_to_dict
from tabla import ParsingTable, TableMode, build_parsing_table, table_to_dict
from simulador import Simulator

logger = logging.getLogger(__name__)

MODE_ENV_VAR = "LR_TABLE_MODE"
DEFAULT_MODE = TableMode.SLR1


def mode_from_env(environ: Optional[Mapping[str, str]] = None) -> TableMode:
    """Lee el modo de tabla de LR_TABLE_MODE (LR0 | SLR1); SLR1 si no está definido."""
    if environ is None:
        environ = os.environ
    value = environ.get(MODE_ENV_VAR, "").strip()
    if not value:
        return DEFAULT_MODE
    return TableMode.parse(value)


@dataclass(frozen=True)
class SessionSeed:
    """Semilla mínima reproducible: gramática, cadena de entrada y modo."""
    grammar_text: str
    input_text: str = ""
    mode: TableMode = DEFAULT_MODE

    def to_json(self) -> str:
        return json.dumps({
            "grammarText": self.grammar_text,
            "inputString": self.input_text,
            "mode": self.mode.value,
        }, ensure_ascii=False, sort_keys=True)

    @classmethod
    def from_json(cls, data: str) -> "SessionSeed":
        raw = json.loads(data)
        return cls(
            grammar_text=raw["grammarText"],
            input_text=raw.get("inputString", ""),
            mode=TableMode.parse(raw.get("mode", DEFAULT_MODE.value)),
        )


@dataclass(frozen=True)
class ParserSession:
    seed: SessionSeed
    grammar: Grammar
    collection: CanonicalCollection
    table: ParsingTable

    @property
    def mode(self) -> TableMode:
        return self.seed.mode

    def new_simulator(self, texto: Optional[str] = None) -> Simulator:
        if texto is None:
            texto = self.seed.input_text
        return Simulator(self.grammar, self.table, texto, self.collection.initial_state)

    def to_dict(self) -> Dict[str, object]:
        return {
            "grammar": grammar_to_dict(self.grammar),
            "collection": collection_to_dict(self.collection),
            "table": table_to_dict(self.table),
        }


def build_session(seed: SessionSeed) -> ParserSession:
    """Texto → Grammar → colección → tabla. GrammarSyntaxError aborta todo el pipeline."""
    grammar = augment_grammar(parse_grammar(seed.grammar_text))
    collection = canonical_collection(grammar)
    table = build_parsing_table(grammar, collection, seed.mode)
    logger.debug("Sesión construida: %d producciones, %d estados, modo %s",
                 len(grammar.productions), len(collection), seed.mode.value)
    return ParserSession(seed, grammar, collection, table)


def with_mode(session: ParserSession, mode: TableMode) -> ParserSession:
    """Reconstruye solo la tabla; la gramática y el autómata se reutilizan."""
    if mode is session.mode:
        return session
    table = build_parsing_table(session.grammar, session.collection, mode)
    return replace(session, seed=replace(session.seed, mode=mode), table=table)


def with_input(session: ParserSession, texto: str) -> ParserSession:
    return replace(session, seed=replace(session.seed, input_text=texto))
