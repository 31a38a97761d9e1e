import plotly.express as px
import pandas as pd

def export_set_chart(rows, path: str):
    if not rows:
        with open(path, "w") as f:
            f.write("<h1>Per-Set Cache Activity</h1><p>No data to display.</p>")
        return

    df = pd.DataFrame(rows)
    for col in ('hits', 'misses', 'evictions'):
        df[col] = pd.to_numeric(df[col], errors='coerce')
    df = df.dropna(subset=['hits', 'misses', 'evictions'])
    df['set'] = df['set'].astype(str)

    long_df = df.melt(id_vars=['set'], value_vars=['hits', 'misses', 'evictions'],
                      var_name='outcome', value_name='count')

    fig = px.bar(
        long_df,
        x="set",
        y="count",
        color="outcome",
        barmode="group",
        title="Per-Set Cache Activity",
        labels={"set": "Set Index", "count": "Accesses", "outcome": "Outcome"}
    )

    fig.update_xaxes(type="category")
    fig.update_layout(
        font=dict(family="Courier New, monospace", size=12),
        legend_title="Outcome"
    )

    fig.write_html(path, include_plotlyjs="cdn", full_html=True)

def export_set_chart_ascii(rows, width: int = 60):
    if not rows:
        return "No set was accessed."

    max_total = max((r['hits'] + r['misses'] for r in rows), default=0)
    if max_total == 0:
        return "No set was accessed."

    scale = width / max_total

    chart = "Per-Set Cache Activity (h=hit, m=miss, e=miss with eviction)\n"
    chart += "-" * (width + 12) + "\n"

    for r in sorted(rows, key=lambda r: r['set']):
        plain_misses = r['misses'] - r['evictions']
        bar = ('h' * round(r['hits'] * scale)
               + 'm' * round(plain_misses * scale)
               + 'e' * round(r['evictions'] * scale))
        chart += f"{r['set']:>8} |{bar[:width]}\n"

    chart += "-" * (width + 12) + "\n"
    chart += f"max accesses per set: {max_total}\n"
    return chart
