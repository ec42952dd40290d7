import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from dataclasses import replace
from datetime import datetime, timedelta

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from spendlens import config
from spendlens.projection import projected_transactions
from spendlens.receipt import extract_receipt_amount, lines_from_text
from spendlens.services import InsightsService
from spendlens.smart_category import CategoryLearner
from spendlens.transforms import add_transaction, load_ledger
from spendlens.trends import compare_months
from spendlens.periods import shift_month
from spendlens.voice import parse_voice_input, to_transaction

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("spendlens.app")

st.set_page_config(page_title="SpendLens", layout="wide")

ledger = load_ledger(config.SEED_PATH)
CUR = config.DEFAULT_CURRENCY

if "tx_transactions" not in st.session_state:
    st.session_state.tx_transactions = ledger.transactions

if "learner" not in st.session_state:
    st.session_state.learner = CategoryLearner.from_config()

now = datetime.now()
report = InsightsService().report(st.session_state.tx_transactions, ledger.budgets, now)
result = report["result"]


def money(value) -> str:
    return f"{float(value):,.2f} {CUR}"


def tx_to_df(tx_list):
    rows = [
        {
            "date": t.date,
            "type": t.type.value,
            "amount": float(t.amount),
            "category": t.category.name if t.category else "-",
            "note": t.note,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["date", "type", "amount", "category", "note"])


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "📂 Categories", "💰 Budgets", "🔁 Recurring", "🕒 Habits", "🎙 Quick Entry"]
)

if menu == "🏠 Overview":
    trends = result["monthly_trends"]
    current = trends[-1] if trends else None

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Transactions", len(st.session_state.tx_transactions))
    with k2:
        st.metric("Income (this month)", money(current.income) if current else "-")
    with k3:
        delta = f"{current.change_percentage:+.1f}%" if current and current.change_percentage is not None else None
        st.metric("Expense (this month)", money(current.expense) if current else "-", delta=delta, delta_color="inverse")
    with k4:
        st.metric("Balance (this month)", money(current.balance) if current else "-")

    fig_ts = go.Figure()
    fig_ts.add_trace(go.Scatter(x=[t.period for t in trends], y=[float(t.income) for t in trends], mode="lines+markers", name="Income"))
    fig_ts.add_trace(go.Scatter(x=[t.period for t in trends], y=[float(t.expense) for t in trends], mode="lines+markers", name="Expense"))
    fig_ts.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

    prev = datetime(*shift_month(now.year, now.month, -1), 1)
    comparison = compare_months(st.session_state.tx_transactions, prev, now)
    st.caption(
        f"Spending vs last month: {money(comparison.difference)} ({comparison.percent_change:+.1f}%)"
    )

    st.subheader("📊 Top Expenses")
    top = result["top_expenses"]
    if top:
        disp = pd.DataFrame([
            {
                "Rank": e.rank,
                "Date": e.transaction.date.strftime("%Y-%m-%d"),
                "Amount": money(e.transaction.amount),
                "Category": e.transaction.category.name if e.transaction.category else "-",
                "Note": e.transaction.note,
            }
            for e in top
        ])
        st.table(disp)
    else:
        st.info("No expenses to display.")

    df = tx_to_df(st.session_state.tx_transactions)
    if not df.empty:
        st.download_button("⬇ Download CSV", df.to_csv(index=False), file_name="transactions.csv")

elif menu == "📂 Categories":
    st.title("📂 Categories")
    breakdown = result["category_breakdown"]
    if breakdown:
        df_cat = pd.DataFrame([
            {"Category": c.category.name, "Total": float(c.amount), "Share": c.percentage, "Count": c.transaction_count}
            for c in breakdown
        ])
        fig_cat = px.pie(df_cat, values="Total", names="Category", title="Expense Distribution")
        fig_cat.update_layout(height=350)
        st.plotly_chart(fig_cat, use_container_width=True)
        st.dataframe(df_cat, use_container_width=True)
    else:
        st.info("No categorized expenses yet")

    st.header("📈 Month over month")
    trends = result["category_trends"]
    if trends:
        st.dataframe(pd.DataFrame([
            {
                "Category": t.category.name,
                "This month": float(t.current_month_amount),
                "Last month": float(t.previous_month_amount),
                "Change %": round(t.change_percentage, 1),
                "Monthly avg": float(t.average_monthly_amount),
                "Trend": "⬆" if t.is_increasing else "⬇",
            }
            for t in trends
        ]), use_container_width=True)

elif menu == "💰 Budgets":
    st.title("💰 Budgets")
    predictions = result["budget_predictions"]
    if not predictions:
        st.info("No budgets defined")
    for budget, p in zip(ledger.budgets, predictions):
        name = budget.category.name if budget.category else "Total"
        st.metric(
            f"{name} ({budget.period.value})",
            f"{money(p.current_spent)} / {money(p.budget_amount)}",
            f"{money(p.remaining_budget)} remaining",
        )
        st.progress(min(p.usage_percentage, 100.0) / 100)
        status = "on track" if p.is_on_track else "over pace"
        st.caption(
            f"Projected {money(p.predicted_total)} ({p.predicted_usage_percentage:.0f}%), {status}, "
            f"day {p.days_elapsed} of {p.days_in_period}, confidence {p.confidence:.0f}%"
        )
        if p.predicted_overage > 0:
            st.warning(f"Projected overage: {money(p.predicted_overage)}")

elif menu == "🔁 Recurring":
    st.title("🔁 Recurring")
    patterns = result["recurring_patterns"]
    st.header("Detected patterns")
    if patterns:
        st.dataframe(pd.DataFrame([
            {
                "Category": p.category.name,
                "Note": p.note or "-",
                "Average": float(p.average_amount),
                "Frequency": p.frequency.value,
                "Occurrences": p.occurrences,
                "Last": p.last_occurrence.strftime("%Y-%m-%d"),
                "Next expected": p.next_expected.strftime("%Y-%m-%d"),
                "Confidence": f"{p.confidence:.0%}",
            }
            for p in patterns
        ]), use_container_width=True)
    else:
        st.info("No recurring spending detected")

    st.header("Upcoming from rules")
    horizon = st.slider("Days ahead", 7, 90, 30)
    upcoming = projected_transactions(ledger.recurring, now, now + timedelta(days=horizon), CUR)
    if upcoming:
        st.dataframe(tx_to_df(sorted(upcoming, key=lambda t: t.date)), use_container_width=True)
    else:
        st.info("Nothing scheduled in this window")

elif menu == "🕒 Habits":
    st.title("🕒 Spending habits")
    by_day = result["by_day_of_week"]
    fig_day = px.bar(
        x=[d.day_name for d in by_day],
        y=[float(d.total_amount) for d in by_day],
        labels={"x": "Day", "y": f"Spent ({CUR})"},
        title="By day of week",
        template="plotly_dark",
    )
    st.plotly_chart(fig_day, use_container_width=True)

    by_hour = result["by_hour"]
    fig_hour = px.bar(
        x=[h.hour for h in by_hour],
        y=[float(h.total_amount) for h in by_hour],
        labels={"x": "Hour", "y": f"Spent ({CUR})"},
        title="By hour",
        template="plotly_dark",
    )
    st.plotly_chart(fig_hour, use_container_width=True)

elif menu == "🎙 Quick Entry":
    st.title("🎙 Quick Entry")
    learner = st.session_state.learner

    st.header("Say it")
    phrase = st.text_input("Phrase", placeholder="커피 5천원 / coffee 5 dollars yesterday")
    if phrase:
        parsed = parse_voice_input(phrase, now)
        st.write({
            "type": parsed.type.value,
            "amount": str(parsed.amount) if parsed.amount is not None else None,
            "date": parsed.date.strftime("%Y-%m-%d") if parsed.date else None,
            "category hint": parsed.category_hint,
            "note": parsed.note,
        })

        options = [c for c in ledger.categories if c.type == parsed.type]
        suggested = learner.suggest_category(parsed.note or phrase, options)
        names = [c.name for c in options]
        index = names.index(suggested.name) if suggested and suggested.name in names else 0
        chosen_name = st.selectbox("Category", names, index=index) if names else None
        chosen = next((c for c in options if c.name == chosen_name), None)

        if st.button("Add transaction", disabled=not parsed.is_valid):
            tx = to_transaction(parsed, ledger.categories, CUR, now)
            if tx is not None:
                if chosen is not None and chosen != tx.category:
                    learner.learn(parsed.note or phrase, chosen)
                    tx = replace(tx, category=chosen)
                st.session_state.tx_transactions = add_transaction(st.session_state.tx_transactions, tx)
                logger.info("Added %s %s via quick entry", tx.type.value, tx.amount)
                st.success(f"Added {money(tx.amount)}")

    st.header("Receipt text")
    raw = st.text_area("Recognized receipt lines", height=180)
    if raw.strip():
        receipt = extract_receipt_amount(lines_from_text(raw))
        if receipt.has_amount:
            st.metric("Detected total", money(receipt.extracted_amount), f"confidence {receipt.confidence:.0%}")
        else:
            st.warning("No amount found")
        if receipt.all_amounts:
            st.caption("Candidates: " + ", ".join(money(a) for a in receipt.all_amounts))

    patterns = learner.learned_patterns()
    if patterns:
        with st.expander("Learned keywords"):
            st.table(pd.DataFrame(sorted(patterns.items()), columns=["Keyword", "Tag"]))
            if st.button("Forget learned keywords"):
                learner.clear()
