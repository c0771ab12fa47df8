"""Application principale Streamlit."""

import logging
import os
from typing import Optional
import streamlit as st

from bilans.config import Settings, available_presets, get_settings, load_preset
from bilans.core.bareme import apply_preset_by_position, effective_scheme
from bilans.core.models import GradingContext, MasteryThresholds
from bilans.core.reports import ReportBuilder
from bilans.core.scoring import ScoringEngine
from bilans.core.statistics import ALL_CLASSES, filter_by_class
from bilans.data.loaders import BilansImportError, CorrectionsLoader, RosterLoader
from bilans.data.store import LocalStore, CORRECTIONS_KEY, ROSTER_KEY

logger = logging.getLogger(__name__)


def _save_upload(uploaded, settings: Settings) -> str:
    """Copie un fichier déposé dans le répertoire de données et retourne son chemin."""
    imports_dir = os.path.join(settings.data_dir, "imports")
    os.makedirs(imports_dir, exist_ok=True)
    path = os.path.join(imports_dir, os.path.basename(uploaded.name))
    with open(path, "wb") as f:
        f.write(uploaded.getbuffer())
    return path


def sidebar_imports(store: LocalStore, settings: Settings):
    """Imports des corrections (JSON) et de la liste d'élèves (CSV/Excel)."""
    st.sidebar.subheader("Imports")

    corrections_file = st.sidebar.file_uploader("Corrections (JSON)", type=["json"], key="corrections_upload")
    if corrections_file is not None and st.sidebar.button("Importer les corrections", key="import_corrections"):
        try:
            corrections = CorrectionsLoader(_save_upload(corrections_file, settings)).load()
            store.save_corrections(corrections)
            st.sidebar.success(f"✅ {corrections.candidate_count} candidats")
        except BilansImportError as e:
            st.sidebar.error(f"❌ {e}")

    roster_file = st.sidebar.file_uploader("Liste d'élèves (CSV/Excel)", type=["csv", "xlsx", "xls"], key="roster_upload")
    if roster_file is not None and st.sidebar.button("Importer la liste", key="import_roster"):
        try:
            roster = RosterLoader(_save_upload(roster_file, settings)).load()
            store.save_roster(roster)
            st.sidebar.success(f"✅ {len(roster)} élèves")
        except BilansImportError as e:
            st.sidebar.error(f"❌ {e}")

    col1, col2 = st.sidebar.columns(2)
    if col1.button("🗑️ Corrections", type="secondary"):
        store.delete(CORRECTIONS_KEY)
        st.rerun()
    if col2.button("🗑️ Élèves", type="secondary"):
        store.delete(ROSTER_KEY)
        st.rerun()


def sidebar_settings(store: LocalStore, settings: Settings) -> Optional[MasteryThresholds]:
    """Seuils de maîtrise et barème."""
    st.sidebar.subheader("Seuils de maîtrise (/20)")
    current = store.load_thresholds()

    tbm = st.sidebar.number_input("Très bonne maîtrise ≥", value=current.tbm, step=0.5)
    ms = st.sidebar.number_input("Maîtrise satisfaisante ≥", value=current.ms, step=0.5)
    mf = st.sidebar.number_input("Maîtrise fragile ≥", value=current.mf, step=0.5)

    try:
        thresholds = MasteryThresholds(tbm=tbm, ms=ms, mf=mf)
    except ValueError as e:
        st.sidebar.error(f"❌ {e}")
        return None

    if thresholds != current:
        store.save_thresholds(thresholds)

    st.sidebar.subheader("Barème")
    presets = available_presets() or [settings.preset]
    preset_name = st.sidebar.selectbox(
        "Barème prédéfini",
        options=presets,
        index=presets.index(settings.preset) if settings.preset in presets else 0,
        key="preset_select"
    )
    if st.sidebar.button("Appliquer le barème"):
        preset = load_preset(preset_name)
        scheme = apply_preset_by_position(effective_scheme(store.load_scheme()), preset)
        store.save_scheme(scheme)
        st.sidebar.success(f"✅ {preset.name}")

    return thresholds


def sidebar_class_filter(context: GradingContext, candidates) -> str:
    classes = sorted({c.classe for c in candidates} | set(context.classes))
    return st.sidebar.radio(
        "Classe",
        options=[ALL_CLASSES] + classes,
        format_func=lambda c: "Toutes classes" if c == ALL_CLASSES else c,
        key="class_filter_radio"
    )


def main():
    """Point d'entrée principal."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = get_settings()
    store = LocalStore(settings.data_dir)

    st.set_page_config(page_title="Bilans – DNB Blanc", page_icon="📊", layout="wide")
    st.sidebar.title("📊 Bilans DNB Blanc")
    st.sidebar.divider()

    sidebar_imports(store, settings)
    st.sidebar.divider()
    thresholds = sidebar_settings(store, settings)

    context = store.load_context()
    if thresholds is not None:
        context.thresholds = thresholds

    engine = ScoringEngine(context)
    candidates = engine.corrected_candidates()

    st.sidebar.divider()
    context.selected_class = sidebar_class_filter(context, candidates)

    if not candidates:
        st.title(f"📊 {settings.exam_title}")
        st.info("👈 Importez le fichier de corrections dans la sidebar")
        return

    filtered = filter_by_class(candidates, context.selected_class)
    class_label = "Toutes classes" if context.selected_class == ALL_CLASSES else context.selected_class
    builder = ReportBuilder(engine, exam_title=settings.exam_title)

    st.title(f"📊 {settings.exam_title} – {class_label} ({len(filtered)} candidats)")

    from bilans.ui.pages.results import ResultsPage
    from bilans.ui.pages.statistics import StatisticsPage
    from bilans.ui.pages.individual import IndividualPage

    tab1, tab2, tab3 = st.tabs(["📋 Résultats", "📈 Statistiques", "👤 Bilan individuel"])

    with tab1:
        ResultsPage(filtered, class_label, settings.exam_title).render()

    with tab2:
        StatisticsPage(builder, filtered, class_label).render()

    with tab3:
        IndividualPage(builder, filtered).render()


if __name__ == "__main__":
    main()
