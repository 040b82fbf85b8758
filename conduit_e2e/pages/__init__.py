"""
Page Object Models for the Conduit UI

This package provides page objects that encapsulate UI interactions
and provide a clean API for the bootstrap services and test code.
"""

from .article_page import ArticlePage
from .base_page import BasePage
from .home_page import HomePage
from .login_page import LoginPage
from .settings_page import SettingsPage
from .signup_page import SignupPage

__all__ = [
    "BasePage",
    "LoginPage",
    "SignupPage",
    "HomePage",
    "ArticlePage",
    "SettingsPage",
]
