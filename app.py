import logging

import streamlit as st
import pandas as pd

from gramatica import EPSILON, GrammarSyntaxError, limpiar_texto
from conjuntos import compute_first, compute_follow
from automatas import items_to_rows, transitions_to_rows
from tabla import TableMode, action_rows, goto_rows
from simulador import InvalidInputError, trace_rows
from sesion import DEFAULT_MODE, SessionSeed, build_session, mode_from_env, with_input, with_mode

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="LR(0) / SLR(1) - Autómata, Tabla y Simulación", page_icon="🧩", layout="wide")

EJEMPLO = "E -> E + T | T\nT -> T * F | F\nF -> ( E ) | id\n"


# ---------- Session helpers ----------
def _store_session(session):
    st.session_state["lr_session"] = session
    st.session_state.pop("simulator", None)

def _has_session() -> bool:
    return "lr_session" in st.session_state

def _get_session():
    return st.session_state["lr_session"]


def _start_simulation(cadena: str):
    session = with_input(_get_session(), cadena)
    st.session_state["lr_session"] = session
    try:
        st.session_state["simulator"] = session.new_simulator()
    except InvalidInputError as e:
        st.session_state.pop("simulator", None)
        st.error(str(e))


def _modo_inicial() -> TableMode:
    try:
        return mode_from_env()
    except ValueError as e:
        st.error(str(e))
        return DEFAULT_MODE


# ---------- App ----------
def app():
    st.title("Analizador LR(0) / SLR(1)")
    st.caption(f"Formato: `S -> A a | b` (una regla por línea). Usa `epsilon` o `{EPSILON}` para la cadena vacía.")

    col1, col2 = st.columns([2, 1])
    with col1:
        gramatica_input = st.text_area("Gramática:", value=EJEMPLO, height=220, key="grammar_text")
    with col2:
        cadena_input = st.text_area("Cadena a analizar (tokens separados por espacio):",
                                    value="id + id * id", height=120)
        modos = [m.value for m in TableMode]
        modo = TableMode(st.radio("Tabla", modos, index=modos.index(_modo_inicial().value), horizontal=True))

    c1, c2 = st.columns(2)
    with c1:
        if st.button("1) Analizar gramática", type="primary", use_container_width=True):
            if gramatica_input.strip() == "":
                st.warning("Por favor ingresa una gramática válida.")
            else:
                try:
                    _store_session(build_session(
                        SessionSeed(limpiar_texto(gramatica_input), cadena_input, modo)))
                    st.success("Gramática analizada ✅")
                except GrammarSyntaxError as e:
                    st.error(str(e))

    with c2:
        if st.button("2) Simular parsing", use_container_width=True):
            if not _has_session():
                st.warning("Primero analiza la gramática.")
            else:
                _start_simulation(cadena_input)

    if not _has_session():
        return

    # Cambiar de modo reutiliza el autómata y reinicia la simulación en curso
    if _get_session().mode is not modo:
        simulando = "simulator" in st.session_state
        _store_session(with_mode(_get_session(), modo))
        if simulando:
            _start_simulation(_get_session().seed.input_text)

    session = _get_session()
    grammar = session.grammar

    # ---- Producciones numeradas
    st.subheader("Gramática aumentada")
    st.dataframe(pd.DataFrame([{"No.": p.id, "Producción": str(p)} for p in grammar.productions]),
                 hide_index=True, use_container_width=True)

    # ---- FIRST / FOLLOW
    st.subheader("FIRST y FOLLOW")
    first = compute_first(grammar)
    follow = compute_follow(grammar, first)
    st.dataframe(pd.DataFrame([
        {"No Terminal": nt,
         "FIRST": ", ".join(sorted(first[nt])),
         "FOLLOW": ", ".join(sorted(follow[nt]))}
        for nt in sorted(grammar.nonterminals)
    ]), hide_index=True, use_container_width=True)

    # ---- Colección canónica
    st.subheader(f"Colección canónica LR(0) — {len(session.collection)} estados")
    all_rows = []
    for state in session.collection.states:
        for r in items_to_rows(state.items):
            r["Estado"] = f"I{state.id}"
            all_rows.append(r)
    df_all = pd.DataFrame(all_rows)[["Estado", "No.", "Producción", "Ítem"]]
    st.dataframe(df_all, hide_index=True, use_container_width=True)

    with st.expander("Transiciones (i --X--> j)", expanded=False):
        st.dataframe(pd.DataFrame(transitions_to_rows(session.collection)),
                     hide_index=True, use_container_width=True)

    # ---- Tabla ACTION / GOTO + conflictos
    st.subheader(f"Tabla {session.mode.value} — ACTION / GOTO")
    df_action = pd.DataFrame(action_rows(session.table)).set_index("Estado")
    df_goto = pd.DataFrame(goto_rows(session.table)).set_index("Estado")
    st.dataframe(pd.concat([df_action, df_goto], axis=1), use_container_width=True)

    conflicts = session.table.conflicts()
    if conflicts:
        st.error("⚠️ Conflictos detectados:")
        for c in conflicts:
            st.write("- " + str(c))
    else:
        st.success("Sin conflictos en ACTION/GOTO.")

    # ---- Simulación paso a paso
    sim = st.session_state.get("simulator")
    if sim is None:
        return

    st.subheader("Simulación — Pila y acciones")
    b1, b2, b3, b4 = st.columns(4)
    if b1.button("⏮ Reiniciar", use_container_width=True):
        sim.reset()
    if b2.button("◀ Atrás", use_container_width=True):
        sim.step_backward()
    if b3.button("Adelante ▶", use_container_width=True):
        sim.step_forward()
    if b4.button("Hasta el final ⏭", use_container_width=True):
        sim.run()

    visible = sim.history[:sim.cursor + 1]
    st.dataframe(pd.DataFrame(trace_rows(visible, grammar)), hide_index=True, use_container_width=True)
    if sim.cursor == len(sim.history) - 1 and sim.finished:
        if sim.accepted:
            st.success("✅ Cadena aceptada.")
        else:
            st.error("❌ Cadena rechazada. Detalle: " + trace_rows(visible[-1:], grammar)[0]["Acción"])

    with st.expander("Semilla de sesión (JSON)", expanded=False):
        st.code(session.seed.to_json(), language="json")


if __name__ == "__main__":
    app()
