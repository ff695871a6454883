# frontend/analytics.py
"""Read-only projections over the fetched expense list, used by the charts and tables."""
from datetime import date, timedelta

import pandas as pd

UNCATEGORIZED = "Uncategorized"
EXPENSE_COLUMNS = ['id', 'title', 'amount', 'category_id', 'category_name', 'created_by', 'date']
SORT_FIELDS = ('date', 'amount', 'title')


def expenses_frame(expenses):
    """Turn the API rows into a DataFrame with parsed dates and numeric amounts."""
    if not expenses:
        df = pd.DataFrame(columns=EXPENSE_COLUMNS + ['date_str'])
        df['date'] = pd.to_datetime(df['date'])
        df['amount'] = pd.to_numeric(df['amount'])
        return df

    df = pd.DataFrame(expenses)
    for col in EXPENSE_COLUMNS:
        if col not in df.columns:
            df[col] = None
    # keep the raw ISO text for prefix matching
    df['date_str'] = df['date'].astype(str).str[:10]
    df['date'] = pd.to_datetime(df['date_str'], errors='coerce')
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce')
    df['category_name'] = df['category_name'].fillna(UNCATEGORIZED).replace('', UNCATEGORIZED)
    return df.dropna(subset=['date', 'amount']).reset_index(drop=True)


def totals_by_category(df):
    if df.empty:
        return pd.DataFrame(columns=['category', 'total'])
    totals = df.groupby('category_name')['amount'].sum().round(2).reset_index()
    totals = totals.rename(columns={'category_name': 'category', 'amount': 'total'})
    return totals.sort_values('total', ascending=False).reset_index(drop=True)


def top_categories(df, n=5):
    return totals_by_category(df).head(n)


def totals_by_month(df):
    """Total per YYYY-MM, oldest first."""
    if df.empty:
        return pd.DataFrame(columns=['month', 'total'])
    months = df.assign(month=df['date'].dt.strftime('%Y-%m'))
    totals = months.groupby('month')['amount'].sum().round(2).reset_index()
    totals = totals.rename(columns={'amount': 'total'})
    return totals.sort_values('month').reset_index(drop=True)


def _shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def last_n_months(df, today=None, n=6):
    """Totals for each of the last n calendar months, ending with today's month, zero-filled."""
    today = today or date.today()
    by_month = dict(totals_by_month(df).itertuples(index=False, name=None))
    rows = []
    for back in range(n - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -back)
        key = f"{year:04d}-{month:02d}"
        rows.append({
            'month': key,
            'label': date(year, month, 1).strftime('%b %Y'),
            'total': float(by_month.get(key, 0.0)),
        })
    return pd.DataFrame(rows)


def daily_totals(df, today=None, days=7):
    """Totals for the trailing `days` calendar dates, matched on the ISO date prefix."""
    today = today or date.today()
    rows = []
    for back in range(days - 1, -1, -1):
        day = today - timedelta(days=back)
        key = day.isoformat()
        if df.empty:
            total = 0.0
        else:
            total = df.loc[df['date_str'].str.startswith(key), 'amount'].sum()
        rows.append({'date': key, 'day': day.strftime('%a'), 'total': round(float(total), 2)})
    return pd.DataFrame(rows)


def month_total(df, year, month):
    if df.empty:
        return 0.0, 0
    mask = (df['date'].dt.year == year) & (df['date'].dt.month == month)
    return round(float(df.loc[mask, 'amount'].sum()), 2), int(mask.sum())


def month_comparison(df, today=None):
    """This month vs last month totals and the percentage change between them."""
    today = today or date.today()
    this_total, this_count = month_total(df, today.year, today.month)
    last_year, last_month = _shift_month(today.year, today.month, -1)
    last_total, last_count = month_total(df, last_year, last_month)

    if last_total > 0:
        change = round((this_total - last_total) / last_total * 100, 1)
    else:
        change = 100.0 if this_total > 0 else 0.0

    return {
        'this_month_total': this_total,
        'this_month_count': this_count,
        'last_month_total': last_total,
        'last_month_count': last_count,
        'percent_change': change,
    }


def summary(df):
    count = len(df)
    total = round(float(df['amount'].sum()), 2) if count else 0.0
    return {'count': count, 'total': total, 'average': round(total / count, 2) if count else 0.0}


def recent(df, n=5):
    return df.sort_values(['date', 'id'], ascending=False).head(n)


def filter_expenses(df, search=None, category_id=None, start=None, end=None):
    """Client-side filtering: title substring (case-insensitive), category id, inclusive date range."""
    out = df
    if search and search.strip():
        out = out[out['title'].astype(str).str.contains(search.strip(), case=False, regex=False, na=False)]
    if category_id is not None:
        out = out[out['category_id'] == category_id]
    if start is not None:
        out = out[out['date'].dt.date >= start]
    if end is not None:
        out = out[out['date'].dt.date <= end]
    return out


def sort_expenses(df, field='date', ascending=False):
    if field not in SORT_FIELDS:
        raise ValueError(f"cannot sort by {field!r}")
    if field == 'title':
        return df.sort_values('title', ascending=ascending, key=lambda s: s.astype(str).str.lower())
    return df.sort_values(field, ascending=ascending, kind='stable')
