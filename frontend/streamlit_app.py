#frontend/streamlit_app.py

import os
import time
from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st

from frontend import analytics
from frontend.api_client import ApiClient, ApiError
from frontend.session import Session
from frontend.validation import validate_expense_form, validate_signup_form

# ---------------- Page config ----------------
st.set_page_config(page_title="Expense Tracker", layout="wide", page_icon="💸")

# ---------------- API base ----------------
API_BASE = os.environ.get("API_BASE", "http://localhost:5000")
CACHE_SECONDS = 120

MONTHS = ["", "January", "February", "March", "April", "May", "June", "July",
          "August", "September", "October", "November", "December"]


# ---------------- Session State Management ----------------
def init_session_state():
    if "session" not in st.session_state:
        st.session_state.session = Session()
    if "last_added_expense" not in st.session_state:
        st.session_state.last_added_expense = None
    if "editing_expense_id" not in st.session_state:
        st.session_state.editing_expense_id = None


def get_client():
    return ApiClient(API_BASE, st.session_state.session)


def clear_user_cache():
    """Clear all cached data for current user"""
    for key in list(st.session_state.keys()):
        if key.startswith("cache_"):
            del st.session_state[key]


def handle_api_error(err):
    st.error(f"❌ {err.message}")
    if err.unauthorized:
        # session was cleared by the client, back to the login form
        clear_user_cache()
        st.warning("🔐 Your session has expired. Please log in again.")
        st.rerun()


def cached(key, loader):
    """Return st.session_state[key] if fresher than CACHE_SECONDS, else reload it."""
    cache_key = f"cache_{key}"
    timestamp_key = f"cache_{key}_timestamp"
    now = time.time()
    if (cache_key in st.session_state and
            now - st.session_state.get(timestamp_key, 0) < CACHE_SECONDS):
        return st.session_state[cache_key]
    value = loader()
    st.session_state[cache_key] = value
    st.session_state[timestamp_key] = now
    return value


def get_expenses(month=None, year=None):
    try:
        rows = cached(f"expenses_{month}_{year}", lambda: get_client().list_expenses(month, year))
    except ApiError as e:
        handle_api_error(e)
        rows = []
    return analytics.expenses_frame(rows)


def get_categories():
    try:
        return cached("categories", get_client().list_categories)
    except ApiError as e:
        handle_api_error(e)
        return []


def money(x):
    return f"₹{x:,.2f}"


# ---------------- Authentication ----------------
def handle_login(email, password):
    try:
        get_client().login(email, password)
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return False
    clear_user_cache()
    st.success("✅ Login successful!")
    return True


def handle_signup(name, email, password):
    errors = validate_signup_form(name, email, password)
    if errors:
        for msg in errors.values():
            st.error(msg)
        return False
    try:
        get_client().signup(name, email, password)
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return False
    st.success("✅ Account created. Logging you in...")
    return handle_login(email, password)


def render_sidebar():
    session = st.session_state.session
    with st.sidebar:
        st.title("🔐 Account")

        if session.is_authenticated:
            st.success(f"Logged in as **{session.email}**")
            if st.button("🚪 Logout", use_container_width=True, key="logout_btn"):
                get_client().logout()
                clear_user_cache()
                st.session_state.last_added_expense = None
                st.session_state.editing_expense_id = None
                st.rerun()
            return

        auth_tab = st.radio("Action", ["Login", "Sign up"], horizontal=True, key="auth_tab")
        name = st.text_input("👤 Name", key="name_input") if auth_tab == "Sign up" else ""
        email = st.text_input("📧 Email", key="email_input")
        password = st.text_input("🔒 Password", type="password", key="password_input")

        if st.button("Submit", use_container_width=True, key="auth_submit"):
            if auth_tab == "Sign up":
                ok = handle_signup(name, email, password)
            elif email and password:
                ok = handle_login(email, password)
            else:
                st.warning("Please enter both email and password")
                ok = False
            if ok:
                st.rerun()


# ---------------- Dashboard Tab ----------------
def render_dashboard():
    st.header("📊 Dashboard")

    df = get_expenses()
    if df.empty:
        st.info("💳 No expenses yet. Add your first expense in the Expenses tab!")
        return

    comparison = analytics.month_comparison(df)
    col1, col2, col3 = st.columns(3)
    col1.metric("This Month", money(comparison['this_month_total']),
                f"{comparison['percent_change']}%", delta_color="inverse")
    col1.caption(f"{comparison['this_month_count']} expenses recorded")
    col2.metric("Last Month", money(comparison['last_month_total']))
    col2.caption(f"{comparison['last_month_count']} expenses recorded")
    col3.metric("All Time", money(analytics.summary(df)['total']))

    col1, col2 = st.columns(2)
    with col1:
        cat_df = analytics.totals_by_category(df)
        fig_pie = px.pie(cat_df, names='category', values='total', title="Spending by Category", hole=0.4)
        st.plotly_chart(fig_pie, use_container_width=True)
    with col2:
        months_df = analytics.last_n_months(df, n=6)
        fig_bar = px.bar(months_df, x='label', y='total', title="Last 6 Months")
        fig_bar.update_layout(template="plotly_white", xaxis_title="", yaxis_title="Amount (₹)")
        st.plotly_chart(fig_bar, use_container_width=True)

    st.subheader("🕒 Recent Expenses")
    st.dataframe(display_frame(analytics.recent(df, 5)), use_container_width=True, hide_index=True)


def display_frame(df):
    display = df[['date', 'title', 'category_name', 'amount']].copy()
    display['date'] = display['date'].dt.strftime('%Y-%m-%d')
    display['amount'] = display['amount'].map(money)
    return display.rename(columns={
        'date': 'Date', 'title': 'Title', 'category_name': 'Category', 'amount': 'Amount'
    })


# ---------------- Expenses Tab ----------------
def category_options():
    categories = get_categories()
    return {c['id']: c['name'] for c in categories}


def render_add_expense(options):
    with st.expander("➕ Add Expense", expanded=True):
        if st.session_state.last_added_expense:
            exp = st.session_state.last_added_expense
            st.success(f"✅ **Added:** {exp['title']} - {money(exp['amount'])}")
            st.session_state.last_added_expense = None

        with st.form("add_expense", clear_on_submit=True):
            col_a, col_b = st.columns(2)
            with col_a:
                title = st.text_input("📝 Title", placeholder="e.g., Lunch")
                amount = st.number_input("💰 Amount", min_value=0.0, value=0.0, format="%.2f", step=10.0)
            with col_b:
                exp_date = st.date_input("📅 Date", value=date.today())
                category_id = st.selectbox("🏷️ Category", [None] + list(options),
                                           format_func=lambda c: "Choose..." if c is None else options[c])

            if st.form_submit_button("💾 Add Expense", use_container_width=True):
                errors = validate_expense_form(title, amount, exp_date, category_id)
                if errors:
                    for msg in errors.values():
                        st.error(msg)
                    return
                try:
                    get_client().create_expense(title.strip(), float(amount), exp_date.isoformat(), category_id)
                except ApiError as e:
                    handle_api_error(e)
                    return
                st.session_state.last_added_expense = {"title": title, "amount": float(amount)}
                clear_user_cache()
                st.rerun()


def render_edit_expense(df, options):
    expense_id = st.session_state.editing_expense_id
    match = df[df['id'] == expense_id]
    if match.empty:
        st.session_state.editing_expense_id = None
        return
    row = match.iloc[0]

    with st.form("edit_expense"):
        st.subheader(f"✏️ Edit: {row['title']}")
        title = st.text_input("📝 Title", value=row['title'])
        amount = st.number_input("💰 Amount", min_value=0.0, value=float(row['amount']), format="%.2f")
        exp_date = st.date_input("📅 Date", value=row['date'].date())
        ids = [None] + list(options)
        current = row['category_id'] if row['category_id'] in options else None
        category_id = st.selectbox("🏷️ Category", ids, index=ids.index(current),
                                   format_func=lambda c: "Choose..." if c is None else options[c])

        col1, col2 = st.columns(2)
        save = col1.form_submit_button("💾 Save", use_container_width=True)
        cancel = col2.form_submit_button("Cancel", use_container_width=True)

    if cancel:
        st.session_state.editing_expense_id = None
        st.rerun()
    if save:
        errors = validate_expense_form(title, amount, exp_date, category_id)
        if errors:
            for msg in errors.values():
                st.error(msg)
            return
        try:
            get_client().update_expense(expense_id, title=title.strip(), amount=float(amount),
                                        date=exp_date.isoformat(), category_id=category_id)
        except ApiError as e:
            handle_api_error(e)
            return
        st.session_state.editing_expense_id = None
        clear_user_cache()
        st.rerun()


def render_expenses():
    st.header("💳 Expenses")

    options = category_options()
    render_add_expense(options)

    # server side month filter
    col1, col2, col3 = st.columns([1, 1, 1])
    with col1:
        month = st.selectbox("🗓️ Month", range(0, 13), format_func=lambda m: MONTHS[m] or "All months",
                             key="filter_month")
    with col2:
        year = st.number_input("Year", min_value=2000, max_value=2100, value=date.today().year,
                               key="filter_year")
    with col3:
        st.write("")
        # fetched on demand, then kept until the next change clears the cache
        if "cache_export_csv" not in st.session_state:
            if st.button("📄 Prepare CSV export", use_container_width=True):
                try:
                    st.session_state.cache_export_csv = get_client().export_csv()
                    st.rerun()
                except ApiError as e:
                    handle_api_error(e)
        else:
            st.download_button("⬇️ Export CSV", st.session_state.cache_export_csv,
                               file_name="expenses.csv", mime="text/csv", use_container_width=True)

    df = get_expenses(month, int(year)) if month else get_expenses()

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        search_term = st.text_input("🔍 Search titles", key="search_term")
    with col2:
        category_filter = st.selectbox("🏷️ Category", [None] + list(options),
                                       format_func=lambda c: "All" if c is None else options[c],
                                       key="category_filter")
    with col3:
        sort_field = st.selectbox("📊 Sort by", list(analytics.SORT_FIELDS), key="sort_field")
    with col4:
        sort_order = st.selectbox("Order", ["Descending", "Ascending"], key="sort_order")

    filtered = analytics.filter_expenses(df, search=search_term, category_id=category_filter)
    filtered = analytics.sort_expenses(filtered, sort_field, ascending=sort_order == "Ascending")

    stats = analytics.summary(filtered)
    col1, col2, col3 = st.columns(3)
    col1.metric("Expenses", stats['count'])
    col2.metric("Total", money(stats['total']))
    col3.metric("Average", money(stats['average']))

    if st.session_state.editing_expense_id is not None:
        render_edit_expense(df, options)

    if filtered.empty:
        st.info("No expenses match your filters.")
        return

    for _, row in filtered.iterrows():
        c1, c2, c3, c4, c5 = st.columns([2, 4, 2, 2, 2])
        c1.write(row['date'].strftime('%Y-%m-%d'))
        c2.write(row['title'])
        c3.write(row['category_name'])
        c4.write(money(row['amount']))
        edit_col, del_col = c5.columns(2)
        if edit_col.button("✏️", key=f"edit_{row['id']}"):
            st.session_state.editing_expense_id = int(row['id'])
            st.rerun()
        if del_col.button("🗑️", key=f"delete_{row['id']}"):
            try:
                get_client().delete_expense(int(row['id']))
            except ApiError as e:
                handle_api_error(e)
            else:
                clear_user_cache()
                st.rerun()

    st.caption(f"Showing {len(filtered)} of {len(df)} expenses")


# ---------------- Analytics Tab ----------------
def render_analytics():
    st.header("📈 Analytics")

    df = get_expenses()
    if df.empty:
        st.info("📊 No expense data for analytics")
        return

    stats = analytics.summary(df)
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Spent", money(stats['total']))
    col2.metric("Average Expense", money(stats['average']))
    col3.metric("Expenses", stats['count'])

    col1, col2 = st.columns(2)
    with col1:
        cat_df = analytics.totals_by_category(df)
        fig_pie = px.pie(cat_df, names='category', values='total', title="Category Distribution")
        st.plotly_chart(fig_pie, use_container_width=True)
    with col2:
        monthly = analytics.totals_by_month(df)
        fig_trend = px.line(monthly, x='month', y='total', markers=True, title="Monthly Spending")
        fig_trend.update_layout(template="plotly_white")
        st.plotly_chart(fig_trend, use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("🏆 Top Categories")
        top = analytics.top_categories(df, 5).copy()
        top['total'] = top['total'].map(money)
        st.dataframe(top.rename(columns={'category': 'Category', 'total': 'Amount'}),
                     use_container_width=True, hide_index=True)
    with col2:
        daily = analytics.daily_totals(df, days=7)
        fig_area = px.area(daily, x='day', y='total', title="Last 7 Days")
        fig_area.update_layout(template="plotly_white", xaxis_title="", yaxis_title="Amount (₹)")
        st.plotly_chart(fig_area, use_container_width=True)


# ---------------- Categories Tab ----------------
def render_categories():
    st.header("🏷️ Categories")

    with st.form("add_category", clear_on_submit=True):
        name = st.text_input("New category name")
        if st.form_submit_button("➕ Add Category"):
            if not name.strip():
                st.error("Category name is required.")
            else:
                try:
                    get_client().create_category(name.strip())
                except ApiError as e:
                    handle_api_error(e)
                else:
                    clear_user_cache()
                    st.success(f"✅ Added category **{name.strip()}**")

    categories = get_categories()
    if not categories:
        st.info("No categories yet")
        return
    cat_df = pd.DataFrame(categories)
    cat_df['Type'] = cat_df['created_by'].map(lambda owner: "Global" if owner is None or pd.isna(owner) else "Yours")
    st.dataframe(cat_df[['name', 'Type']].rename(columns={'name': 'Name'}),
                 use_container_width=True, hide_index=True)


# ---------------- Main App ----------------
def main():
    init_session_state()
    st.title("💰 Expense Tracker")

    render_sidebar()

    if not st.session_state.session.is_authenticated:
        st.info("🔐 Please login or sign up from the sidebar to start tracking expenses")
        return

    tab1, tab2, tab3, tab4 = st.tabs(["📊 Dashboard", "💳 Expenses", "📈 Analytics", "🏷️ Categories"])
    with tab1:
        render_dashboard()
    with tab2:
        render_expenses()
    with tab3:
        render_analytics()
    with tab4:
        render_categories()


if __name__ == "__main__":
    main()
