import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import replace
from datetime import date, datetime, timezone

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from fintrack.config import load_settings
from fintrack.domain import EXPENSE, INCOME, Budget, Category, Transaction, TransactionFilters
from fintrack.errors import FinanceTrackerError
from fintrack.formatting import (
    budget_progress_color,
    describe_remaining,
    escape_dollars,
    format_currency,
    format_date,
    format_month,
    format_percentage,
)
from fintrack.functional import validate_budget, validate_category, validate_transaction
from fintrack.log import configure, get_logger
from fintrack.money import round_cents, total
from fintrack.periods import current_month, shift_month
from fintrack.reports import budget_progress, resolve_category
from fintrack.seed import generate_seed_data
from fintrack.services import ReportService
from fintrack.transforms import (
    add_budget,
    add_category,
    add_transaction,
    budgets_for_month,
    categories_of_type,
    delete_budget,
    delete_category,
    delete_transaction,
    filter_transactions,
    load_seed,
    next_id,
    recent_transactions,
    update_budget,
)

CHART_COLORS = {"income": "#22c55e", "expense": "#ef4444"}

st.set_page_config(page_title="Finance Tracker", layout="wide")

settings = load_settings()
configure(settings.log_level)
logger = get_logger("app")


def load_data():
    if settings.seed_path.exists():
        return load_seed(settings.seed_path)
    today = date.today()
    year, month = shift_month(today.year, today.month, -(settings.trend_months - 1))
    logger.info("No seed file at %s, generating sample data", settings.seed_path)
    return generate_seed_data(year, settings.trend_months, rng_seed=42, start_month=month)


if "transactions" not in st.session_state:
    try:
        categories, transactions, budgets = load_data()
    except FinanceTrackerError as e:
        st.error(f"Could not load data: {e}")
        st.stop()
    st.session_state.categories = categories
    st.session_state.transactions = transactions
    st.session_state.budgets = budgets

if "filters" not in st.session_state:
    st.session_state.filters = TransactionFilters()

categories = st.session_state.categories
transactions = st.session_state.transactions
budgets = st.session_state.budgets
service = ReportService(trend_months=settings.trend_months)


def tx_to_df(tx_list):
    rows = []
    for t in tx_list:
        name, _ = resolve_category(t.category_id, categories)
        signed = t.amount if t.type == INCOME else -t.amount
        rows.append({
            "ID": t.id,
            "Date": format_date(t.date),
            "Description": t.description,
            "Category": name,
            "Type": t.type.capitalize(),
            "Amount": format_currency(signed),
        })
    return pd.DataFrame(rows, columns=["ID", "Date", "Description", "Category", "Type", "Amount"])


def show_budget_bars(progress):
    for item in progress:
        color = budget_progress_color(item.percentage)
        st.markdown(
            f"<span style='color:{item.color}'>●</span> **{item.category_name}** "
            f"{escape_dollars(format_currency(item.spent))} of "
            f"{escape_dollars(format_currency(item.budgeted))} "
            f"<span style='color:{color}'>({format_percentage(item.percentage, 1)})</span>",
            unsafe_allow_html=True,
        )
        st.progress(min(item.percentage, 100) / 100)
        if item.remaining < 0:
            st.caption(f":red[{escape_dollars(describe_remaining(item.remaining))}]")
        else:
            st.caption(escape_dollars(describe_remaining(item.remaining)))


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "🧾 Transactions", "🗂 Categories", "💰 Budgets"]
)

if menu == "🏠 Dashboard":
    report = service.dashboard(transactions, categories, budgets)
    summary = report["summary"]

    st.title("🏠 Dashboard")
    st.caption(f"Overview of your finances for {format_month(report['month'])}")

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Balance", format_currency(summary.total_balance))
    with k2:
        st.metric("Total Income", format_currency(summary.total_income))
    with k3:
        st.metric("Total Expenses", format_currency(summary.total_expenses))
    with k4:
        st.metric("Transactions", summary.transaction_count)

    col_trend, col_pie = st.columns(2)
    with col_trend:
        st.subheader("Monthly Trend")
        trend = report["trend"]
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Bar(x=[m.year_month for m in trend], y=[m.income for m in trend],
                                name="Income", marker_color=CHART_COLORS["income"]))
        fig_ts.add_trace(go.Bar(x=[m.year_month for m in trend], y=[m.expenses for m in trend],
                                name="Expenses", marker_color=CHART_COLORS["expense"]))
        fig_ts.update_xaxes(tickvals=[m.year_month for m in trend], ticktext=[m.month for m in trend])
        fig_ts.update_layout(barmode="group", margin=dict(t=30, b=10, l=10, r=10), yaxis_tickprefix="$")
        st.plotly_chart(fig_ts, use_container_width=True)

    with col_pie:
        st.subheader("Spending by Category")
        spending = report["spending"]
        if spending:
            df_sp = pd.DataFrame([s.__dict__ for s in spending])
            fig_pie = px.pie(
                df_sp,
                values="amount",
                names="category_name",
                color="category_name",
                color_discrete_map={s.category_name: s.color for s in spending},
                hole=0.4,
            )
            fig_pie.update_layout(margin=dict(t=30, b=10, l=10, r=10))
            st.plotly_chart(fig_pie, use_container_width=True)
        else:
            st.info("No expenses to display.")

    col_recent, col_budget = st.columns(2)
    with col_recent:
        st.subheader("Recent Transactions")
        recent = recent_transactions(transactions, settings.recent_limit)
        if recent:
            st.table(tx_to_df(recent).drop(columns=["ID"]))
        else:
            st.info("No recent transactions")
    with col_budget:
        st.subheader("Budget Progress")
        if report["budgets"]:
            show_budget_bars(report["budgets"])
        else:
            st.info(f"No budgets for {format_month(report['month'])}")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    filters = st.session_state.filters

    st.subheader("Filters")
    col1, col2, col3 = st.columns(3)
    with col1:
        type_options = ["All", INCOME, EXPENSE]
        type_choice = st.selectbox(
            "Type", type_options,
            index=type_options.index(filters.type) if filters.type else 0,
            format_func=lambda v: v.capitalize(),
        )
    with col2:
        cat_options = ["All"] + [c.id for c in categories]
        cat_choice = st.selectbox(
            "Category", cat_options,
            index=cat_options.index(filters.category_id) if filters.category_id in cat_options else 0,
            format_func=lambda cid: "All" if cid == "All" else resolve_category(cid, categories)[0],
        )
    with col3:
        search = st.text_input("Search", value=filters.search)

    use_dates = st.checkbox("Filter by date", value=bool(filters.start_date or filters.end_date))
    start_date = end_date = None
    if use_dates:
        d1, d2 = st.columns(2)
        with d1:
            start = st.date_input("From", value=date.fromisoformat(filters.start_date) if filters.start_date else date.today().replace(day=1))
        with d2:
            end = st.date_input("To", value=date.fromisoformat(filters.end_date) if filters.end_date else date.today())
        start_date, end_date = start.isoformat(), end.isoformat()

    st.session_state.filters = replace(
        filters,
        type=None if type_choice == "All" else type_choice,
        category_id=None if cat_choice == "All" else cat_choice,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    if st.button("Reset filters"):
        st.session_state.filters = TransactionFilters()
        st.rerun()

    filtered = filter_transactions(transactions, st.session_state.filters)
    st.caption(f"{len(filtered)} of {len(transactions)} transactions")
    if filtered:
        df = tx_to_df(filtered)
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.download_button("⬇ Download CSV", df.to_csv(index=False), file_name="transactions.csv", mime="text/csv")
    else:
        st.info("No transactions match the selected filters")

    st.divider()
    st.subheader("➕ Add Transaction")
    new_type = st.radio("Type", [EXPENSE, INCOME], horizontal=True, format_func=lambda v: v.capitalize())
    type_cats = categories_of_type(categories, new_type)
    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount ($)", min_value=0.0, step=1.0, format="%.2f")
            tx_date = st.date_input("Date", value=date.today())
        with col2:
            category = st.selectbox("Category", type_cats, format_func=lambda c: c.name)
            description = st.text_input("Description")
        submitted = st.form_submit_button("Add Transaction")

    if submitted:
        now = datetime.now(timezone.utc)
        new_tx = Transaction(
            id=next_id(transactions),
            type=new_type,
            amount=float(amount),
            category_id=category.id if category else "",
            date=datetime.combine(tx_date, now.time()).strftime("%Y-%m-%dT%H:%M:%S.000Z"),
            description=description.strip(),
            created_at=now.strftime("%Y-%m-%dT%H:%M:%S.000Z"),
        )
        result = validate_transaction(new_tx, categories, require_description=True)
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            st.session_state.transactions = add_transaction(transactions, new_tx)
            logger.info("Added %s transaction %s", new_tx.type, new_tx.id)
            st.success("Transaction added")
            st.rerun()

    st.divider()
    st.subheader("🗑 Delete Transaction")
    if filtered:
        to_delete = st.selectbox(
            "Transaction", [t.id for t in filtered],
            format_func=lambda tid: next(
                f"{format_date(t.date)} · {t.description} · {format_currency(t.amount)}"
                for t in filtered if t.id == tid
            ),
        )
        if st.button("Delete", type="primary"):
            try:
                st.session_state.transactions = delete_transaction(transactions, to_delete)
            except FinanceTrackerError as e:
                st.error(str(e))
            else:
                logger.info("Deleted transaction %s", to_delete)
                st.rerun()

elif menu == "🗂 Categories":
    st.title("🗂 Categories")
    spent_by_cat = {}
    for t in transactions:
        spent_by_cat[t.category_id] = spent_by_cat.get(t.category_id, 0) + t.amount

    col_exp, col_inc = st.columns(2)
    for col, kind, title in ((col_exp, EXPENSE, "Expense"), (col_inc, INCOME, "Income")):
        with col:
            st.subheader(f"{title} categories")
            rows = [
                {
                    "Name": c.name,
                    "Color": c.color,
                    "Transactions": sum(1 for t in transactions if t.category_id == c.id),
                    "Total": format_currency(spent_by_cat.get(c.id, 0)),
                }
                for c in categories_of_type(categories, kind)
            ]
            if rows:
                st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)
            else:
                st.info(f"No {kind} categories")

    st.divider()
    st.subheader("➕ Add Category")
    with st.form("category_form", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            name = st.text_input("Name")
        with col2:
            kind = st.selectbox("Type", [EXPENSE, INCOME], format_func=lambda v: v.capitalize())
        with col3:
            color = st.color_picker("Color", value="#6366f1")
        submitted = st.form_submit_button("Add Category")

    if submitted:
        new_cat = Category(id=next_id(categories), name=name.strip(), color=color, type=kind)
        result = validate_category(new_cat)
        if result.is_left():
            st.error(result.get_error()["message"])
        else:
            st.session_state.categories = add_category(categories, new_cat)
            logger.info("Added category %s (%s)", new_cat.name, new_cat.type)
            st.rerun()

    st.subheader("🗑 Delete Category")
    st.caption("Transactions in a deleted category are kept and reported as \"Unknown\".")
    if categories:
        to_delete = st.selectbox("Category", [c.id for c in categories],
                                 format_func=lambda cid: resolve_category(cid, categories)[0])
        if st.button("Delete", type="primary"):
            try:
                st.session_state.categories = delete_category(categories, to_delete)
            except FinanceTrackerError as e:
                st.error(str(e))
            else:
                st.rerun()

elif menu == "💰 Budgets":
    st.title("💰 Budgets")
    this_month = current_month()
    months = sorted({b.month for b in budgets if b.month} | {this_month}, reverse=True)
    month = st.selectbox("Month", months, index=months.index(this_month), format_func=format_month)

    month_budgets = budgets_for_month(budgets, month)
    progress = budget_progress(transactions, month_budgets, categories, month)
    st.caption("Only spending in budgeted categories is shown here.")

    if progress:
        total_budgeted = total(p.budgeted for p in progress)
        total_spent = total(p.spent for p in progress)
        c1, c2, c3 = st.columns(3)
        c1.metric("Budgeted", format_currency(total_budgeted))
        c2.metric("Spent", format_currency(total_spent))
        c3.metric("Remaining", format_currency(round_cents(total_budgeted - total_spent)))

        show_budget_bars(progress)

        df_b = pd.DataFrame([
            {"Category": p.category_name, "Budgeted": p.budgeted, "Spent": p.spent} for p in progress
        ])
        fig = px.bar(df_b, x="Category", y=["Budgeted", "Spent"], barmode="group",
                     title=f"Budget vs. actual, {format_month(month)}")
        fig.update_layout(yaxis_tickprefix="$", legend_title_text="")
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info(f"No budgets for {format_month(month)}")

    st.divider()
    st.subheader("➕ Add Budget")
    expense_cats = categories_of_type(categories, EXPENSE)
    with st.form("budget_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            category = st.selectbox("Category", expense_cats, format_func=lambda c: c.name)
        with col2:
            amount = st.number_input("Amount ($)", min_value=0.0, step=10.0, format="%.2f")
        submitted = st.form_submit_button(f"Add budget for {format_month(month)}")

    if submitted:
        new_budget = Budget(
            category_id=category.id if category else "",
            amount=float(amount),
            month=month,
            id=next_id(budgets),
        )
        result = validate_budget(new_budget)
        if result.is_left():
            st.error(result.get_error()["message"])
        elif any(b.category_id == new_budget.category_id for b in month_budgets):
            st.error(f"{category.name} already has a budget for {format_month(month)}")
        else:
            st.session_state.budgets = add_budget(budgets, new_budget)
            st.rerun()

    if month_budgets:
        st.subheader("✏️ Edit Budget")
        chosen = st.selectbox("Budget", [b.id for b in month_budgets],
                              format_func=lambda bid: next(
                                  resolve_category(b.category_id, categories)[0]
                                  for b in month_budgets if b.id == bid))
        current = next(b for b in month_budgets if b.id == chosen)
        new_amount = st.number_input("New amount ($)", min_value=0.0, value=float(current.amount),
                                     step=10.0, format="%.2f", key=f"edit_{chosen}")
        col_save, col_del = st.columns(2)
        with col_save:
            if st.button("Save"):
                result = validate_budget(replace(current, amount=new_amount))
                if result.is_left():
                    st.error(result.get_error()["message"])
                else:
                    st.session_state.budgets = update_budget(budgets, chosen, new_amount)
                    st.rerun()
        with col_del:
            if st.button("Delete budget", type="primary"):
                st.session_state.budgets = delete_budget(budgets, chosen)
                st.rerun()
