# app.py
# -----------------------------------------------
# 📄 Holerite + Relatório de Lucro (Streamlit)
# -----------------------------------------------
# Requer: streamlit, sqlmodel, pandas, reportlab, psycopg2-binary (se usar Postgres)
# Os valores derivados (horas/extras) são recalculados a cada carga e após cada alteração.

import logging
from datetime import date

import streamlit as st

import config
from domain import ROLE_CHECKER, ROLE_INSPECTOR, ROLE_NORMAL, WorkDay
from errors import EngineError
from repository import WorkDayRepository
from services import RateEngine, ReportBuilder
from utils import (
    brl,
    dataframe_to_pdf,
    parse_hhmm,
    report_to_dataframe,
    statement_to_dataframe,
    time_options,
)

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("holerite")

st.set_page_config(page_title="Sistema de Holerite", page_icon="📑", layout="centered")

NO_BREAK = "—"
TIME_OPTIONS = time_options(5)
BREAK_OPTIONS = [NO_BREAK] + TIME_OPTIONS
ROLE_LABELS = {ROLE_NORMAL: "Normal", ROLE_CHECKER: "Conferente", ROLE_INSPECTOR: "Fiscal"}


@st.cache_resource
def get_repo(url: str) -> WorkDayRepository:
    return WorkDayRepository(url, echo=False)


def get_builder() -> ReportBuilder:
    # rate table is re-read on every run so an edited RATES_FILE applies at once
    return ReportBuilder(RateEngine(config.load_rate_table()))


repo = get_repo(config.DB_URL)
builder = get_builder()


def load_days() -> tuple[list[WorkDay], EngineError | None]:
    """Loads the collection and refreshes the cached hours of every record.

    A record that cannot be refreshed leaves the collection as stored and the
    error is handed back so the page can offer to remove it.
    """
    days = repo.list_all()
    try:
        refreshed = builder.engine.calculator.refresh(days)
    except EngineError as exc:
        logger.warning("could not refresh record #%s: %s", exc.index, exc)
        return days, exc
    changed = repo.update_derived(refreshed)
    if changed:
        logger.info("refreshed derived fields on %d records", changed)
    return refreshed, None


def show_engine_error(exc: EngineError, days: list[WorkDay]) -> None:
    where = ""
    if exc.index is not None and exc.index < len(days):
        d = days[exc.index]
        where = f" (dia {d.work_date.strftime('%d/%m/%Y')}, {d.company or 'sem empresa'})"
    st.error(f"Registro inválido{where}: {exc}. Corrija ou remova o registro.")


def remove_controls(days: list[WorkDay], key: str) -> None:
    labels = [f"{d.work_date.strftime('%d/%m/%Y')} · {d.company or '-'} · {d.role} · {d.time_range}" for d in days]
    idx = st.selectbox("Remover dia", options=range(len(days)), format_func=lambda i: labels[i], key=f"{key}_idx")
    if st.button("❌ Remover", key=key, use_container_width=True):
        repo.remove(days[idx].record_id)
        st.rerun()


def selectbox_state(label: str, key: str, default_value: str, options: list[str]):
    if key not in st.session_state:
        st.session_state[key] = default_value
    return st.selectbox(label, options=options, key=key)


def _reset_form_if_requested():
    if st.session_state.pop("_reset_add_form", False):
        for k in ("entrada_str", "saida_str", "int_ini_str", "int_fim_str", "feriado"):
            st.session_state.pop(k, None)
    msg = st.session_state.pop("_flash_success", None)
    if msg:
        st.success(msg)


# =========================
# Página: Holerite
# =========================
def page_holerite():
    st.subheader("📄 Gerador de Holerite")
    nome = st.text_input("Prestador de Serviço", key="prestador_nome")
    cpf = st.text_input("CPF", key="prestador_cpf")
    cnpj = st.text_input("CNPJ", key="prestador_cnpj")

    st.divider()
    st.markdown("**Lançar dia trabalhado**")
    _reset_form_if_requested()

    data = st.date_input("Data", value=date.today(), format="DD/MM/YYYY")
    empresa = st.text_input("Empresa", key="empresa")
    funcao = st.selectbox("Função", options=list(builder.engine.rates.roles),
                          format_func=lambda r: ROLE_LABELS.get(r, r), key="funcao")
    c1, c2 = st.columns(2)
    with c1:
        selectbox_state("Entrada", "entrada_str", "08:00", TIME_OPTIONS)
        selectbox_state("Intervalo (início)", "int_ini_str", NO_BREAK, BREAK_OPTIONS)
    with c2:
        selectbox_state("Saída", "saida_str", "17:00", TIME_OPTIONS)
        selectbox_state("Intervalo (fim)", "int_fim_str", NO_BREAK, BREAK_OPTIONS)
    feriado = st.checkbox("Feriado", key="feriado")

    if st.button("Adicionar", key="adicionar", use_container_width=True):
        entrada = parse_hhmm(st.session_state["entrada_str"])
        saida = parse_hhmm(st.session_state["saida_str"])
        int_ini = parse_hhmm(st.session_state["int_ini_str"])
        int_fim = parse_hhmm(st.session_state["int_fim_str"])
        novo = WorkDay(
            work_date=data, company=empresa.strip(), role=funcao,
            clock_in=entrada, clock_out=saida,
            break_start=int_ini, break_end=int_fim, is_holiday=feriado,
        )
        try:
            novo = builder.engine.calculator.complete_shift(novo)
            builder.engine.price(novo)
        except EngineError as exc:
            st.warning(f"Não foi possível lançar o dia: {exc}")
        else:
            repo.add(novo)
            st.session_state["_reset_add_form"] = True
            st.session_state["_flash_success"] = (
                f"Lançado {data.strftime('%d/%m/%Y')}: {novo.hours_worked:.2f} h · Extras: {novo.overtime_hours:.2f} h"
            )
            st.rerun()

    st.markdown("**Dias lançados**")
    days, error = load_days()
    if not days:
        st.info("Nenhum dia lançado.")
        return
    if error is None:
        try:
            lines = builder.pay_statement(days)
        except EngineError as exc:
            error = exc
    if error is not None:
        show_engine_error(error, days)
        remove_controls(days, "remover_holerite")
        return

    df = statement_to_dataframe(lines)
    st.dataframe(df, use_container_width=True, hide_index=True)

    remove_controls(days, "remover_holerite")

    total = sum(ln.total for ln in lines)
    pdf_bytes = dataframe_to_pdf(
        df,
        title=config.APP_TITLE,
        header_lines=[f"Prestador: {nome}", f"CPF: {cpf}", f"CNPJ: {cnpj}"],
        summary_lines=[f"Total a receber: {brl(total)}"],
    )
    st.download_button(
        "Gerar PDF", data=pdf_bytes, file_name="holerite.pdf",
        mime="application/pdf", use_container_width=True,
    )


# =========================
# Página: Relatório de Lucro
# =========================
def page_lucro():
    st.subheader("📊 Relatório de Lucro")
    c1, c2 = st.columns(2)
    with c1:
        outros = st.number_input("Outros custos mensais", min_value=0.0, step=0.01, value=0.0)
    with c2:
        descontos = st.number_input("Descontos adicionais", min_value=0.0, step=0.01, value=0.0)

    days, error = load_days()
    if error is None:
        try:
            totals = builder.build_report(days, outros, descontos)
        except EngineError as exc:
            error = exc
    if error is not None:
        show_engine_error(error, days)
        remove_controls(days, "remover_lucro")
        return

    st.markdown("#### Receita da Empresa")
    st.write(f"Diárias: {brl(totals.company_daily_revenue)}")
    st.write(f"Horas Extras: {brl(totals.company_overtime_revenue)}")
    st.write(f"**Total Empresa:** {brl(totals.company_revenue_total)}")

    st.markdown("#### Receita do Trabalhador")
    st.write(f"Diárias: {brl(totals.provider_daily_total)}")
    st.write(f"Horas Extras: {brl(totals.provider_overtime_total)}")
    st.write(f"Alimentação: {brl(totals.provider_meal_total)}")
    st.write(f"Transporte: {brl(totals.provider_transport_total)}")
    st.write(f"**Total Trabalhador:** {brl(totals.provider_pay_total)}")

    st.markdown("#### Custos da Empresa")
    st.write(f"Pagamentos ao Trabalhador (diárias + extras): {brl(totals.provider_cost_total)}")
    st.write(f"Outros Custos (mensal): {brl(totals.other_monthly_costs)}")
    st.write(f"Descontos Adicionais: {brl(totals.additional_deductions)}")

    st.divider()
    st.markdown(f"### Lucro Final: {brl(totals.net_profit)}")

    pdf_bytes = dataframe_to_pdf(report_to_dataframe(totals), title=config.PROFIT_TITLE, wide=False)
    st.download_button(
        "Gerar PDF", data=pdf_bytes, file_name="relatorio-lucro.pdf",
        mime="application/pdf", use_container_width=True,
    )


st.title("📑 Sistema de Holerite")

PAGES = {"Gerar Holerite": page_holerite, "Relatório de Lucro": page_lucro}
escolha = st.sidebar.radio("Escolha uma opção", list(PAGES))
PAGES[escolha]()
