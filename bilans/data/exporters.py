"""Exports des résultats de classe (Excel, CSV)."""

import logging
from typing import IO, Sequence, Union
import pandas as pd

from bilans.core.mastery import niveau_label
from bilans.core.models import CorrectedCandidate
from bilans.core.reports import DEFAULT_EXAM_TITLE, format_score, results_table
from bilans.core.statistics import CohortStatistics

logger = logging.getLogger(__name__)

EXPORT_HEADER = ['N°', 'Nom', 'Prénom', 'Classe', 'Note /20', 'Niveau']


def class_export_rows(
    candidates: Sequence[CorrectedCandidate],
    class_label: str = "Toutes classes",
    exam_title: str = DEFAULT_EXAM_TITLE,
) -> list:
    """
    Lignes de la feuille « Bilan » : titre, tableau trié puis statistiques.

    La note reste numérique (arrondie au dixième) pour être exploitable dans le tableur.
    """
    stats = CohortStatistics(candidates)
    width = len(EXPORT_HEADER)

    def padded(*cells):
        return list(cells) + [''] * (width - len(cells))

    rows = [
        padded(exam_title),
        padded(f"Classe: {class_label}"),
        padded(),
        list(EXPORT_HEADER),
    ]

    table = results_table(candidates)
    for record in table.itertuples(index=False):
        rows.append([record.numero, record.nom, record.prenom, record.classe, record.note, record.niveau])

    rows.append(padded())
    rows.append(padded('Statistiques'))
    rows.append(padded('Effectif', len(stats)))
    rows.append(padded('Moyenne', format_score(stats.mean())))
    for level, count in stats.mastery_counts().items():
        rows.append(padded(level.value, count, niveau_label(level)))
    return rows


def export_class_excel(
    candidates: Sequence[CorrectedCandidate],
    target: Union[str, IO[bytes]],
    class_label: str = "Toutes classes",
    exam_title: str = DEFAULT_EXAM_TITLE,
) -> None:
    """
    Écrit le bilan de classe dans un classeur Excel (feuille « Bilan »).

    Args:
        candidates: Candidats corrigés à exporter
        target: Chemin du fichier ou buffer binaire
        class_label: Nom de la classe affiché en en-tête
        exam_title: Titre de l'épreuve
    """
    rows = class_export_rows(candidates, class_label, exam_title)
    with pd.ExcelWriter(target, engine='openpyxl') as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name='Bilan', header=False, index=False)
    logger.info("Export Excel: %d candidats (%s)", len(candidates), class_label)


def export_results_csv(candidates: Sequence[CorrectedCandidate]) -> bytes:
    """Tableau des résultats en CSV (séparateur « ; » pour les tableurs français)."""
    table = results_table(candidates).drop(columns=['note_affichee'])
    return table.to_csv(index=False, sep=';').encode('utf-8')


def export_filename(class_label: str, extension: str = "xlsx") -> str:
    safe_label = class_label.replace(' ', '_') if class_label else "Toutes_classes"
    return f"Bilan_{safe_label}.{extension}"
