"""Point d'entrée principal de l'application Streamlit (streamlit run bilans/ui/app.py)."""

import os
import sys

# Ajouter le répertoire racine au path pour les imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from bilans.ui.app_main import main

if __name__ == "__main__":
    main()
