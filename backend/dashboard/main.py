import json
from pathlib import Path
import sys

import streamlit as st

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from analytics.metrics import dashboard_stats, level_timeline
from config.settings import load_session_config
from data.attempt_store import load_attempts
from data.export import build_export, export_filename
from game.palette import REFERENCE_PALETTE

st.set_page_config(page_title="Color Tap Dashboard", layout="wide")
cfg = load_session_config()

st.title("Color Tap — журнал попыток")
st.caption("Фрустрация, действия движка адаптации и источник решений")

store_path = Path(st.text_input("Файл журнала", value=str(cfg.store_path)))
attempts = load_attempts(store_path, cfg.max_attempts)

if not attempts:
    st.warning("Пока нет попыток.")
    st.stop()

stats = dashboard_stats(attempts)
col1, col2, col3, col4 = st.columns(4)
col1.metric("Попыток", stats["total"])
col2.metric("Точность", f"{stats['accuracy']}%")
col3.metric("Ср. время", f"{stats['avg_latency']:.1f} c")
col4.metric("Ср. фрустрация", f"{stats['avg_frustration']:.2f}")

col5, col6, col7, col8 = st.columns(4)
col5.metric("Поддержка", f"{stats['support_pct']}%")
col6.metric("Облегчение", f"{stats['ease_pct']}%")
col7.metric("Подсказок в ср.", f"{stats['hint_avg']:.1f}")
col8.metric("Решения сервера", f"{stats['remote_pct']}%")

st.subheader("Фрустрация по попыткам")
st.line_chart([a.frustration_value for a in attempts])

st.subheader("Уровень после попытки (0 = easy, 2 = hard)")
st.line_chart(level_timeline(attempts))

rows = [a.to_dict() for a in reversed(attempts)]
st.dataframe(rows, use_container_width=True, hide_index=True)

export_doc = build_export(attempts, REFERENCE_PALETTE.categories)
st.download_button(
    "Скачать JSON",
    data=json.dumps(export_doc, ensure_ascii=False, indent=2),
    file_name=export_filename(),
    mime="application/json",
)
st.caption(f"Источник данных: {store_path}")
