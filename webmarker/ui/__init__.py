"""Headless view-models of the popup surfaces."""

from webmarker.ui.chip_list import ChipInputState, ChipListModel
from webmarker.ui.header_toggle import HeaderToggleModel
from webmarker.ui.sign_in import SignInForm

__all__ = ["ChipInputState", "ChipListModel", "HeaderToggleModel", "SignInForm"]
