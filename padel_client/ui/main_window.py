from __future__ import annotations

from datetime import date
import logging
import threading
import traceback

import customtkinter as ctk

from padel_client.apis import AuthApi, MatchesApi, ProfileApi
from padel_client.config import AppSettings, ConfigurationError
from padel_client.formatting import (
	format_dashboard,
	format_match,
	format_profile,
	format_session_status,
)
from padel_client.http import HttpClient
from padel_client.logging_utils import configure_logging
from padel_client.models import SessionState
from padel_client.services import PadelService
from padel_client.session import SessionManager
from padel_client.storage import build_stores

logger = logging.getLogger(__name__)

ERROR_COLOR = "#d14343"


class MainWindow(ctk.CTk):
	def __init__(self, service: PadelService):
		super().__init__()
		self._service = service
		self.title("Padel League")
		self.geometry("960x720")
		self.minsize(820, 620)

		self._status_label = ctk.CTkLabel(self, text="Loading session...")
		self._status_label.pack(anchor="w", padx=16, pady=(16, 4))

		self._error_label = ctk.CTkLabel(self, text="", text_color=ERROR_COLOR)
		self._error_label.pack(anchor="w", padx=16, pady=(0, 4))

		self._progress_bar = ctk.CTkProgressBar(self, mode="indeterminate")
		self._progress_bar.pack(fill="x", padx=16, pady=(0, 8))
		self._pending_requests = 0

		login_row = ctk.CTkFrame(self)
		login_row.pack(fill="x", padx=16, pady=(0, 8))

		self._identifier = ctk.CTkEntry(login_row, placeholder_text="Email or username", width=240)
		self._identifier.pack(side="left", padx=(8, 6), pady=8)

		self._password = ctk.CTkEntry(login_row, placeholder_text="Password", show="*", width=180)
		self._password.pack(side="left", padx=6, pady=8)
		self._password.bind("<Return>", lambda _event: self._sign_in())

		self._sign_in_btn = ctk.CTkButton(login_row, text="Sign in", command=self._sign_in)
		self._sign_in_btn.pack(side="left", padx=6, pady=8)

		self._sign_out_btn = ctk.CTkButton(login_row, text="Sign out", command=self._sign_out)
		self._sign_out_btn.pack(side="left", padx=6, pady=8)

		self._tabview = ctk.CTkTabview(self)
		self._tabview.pack(fill="both", expand=True, padx=16, pady=(0, 16))
		for name in ("Profile", "Matches", "Record Result", "Coordinate", "Register"):
			self._tabview.add(name)

		self._build_profile_tab(self._tabview.tab("Profile"))
		self._build_matches_tab(self._tabview.tab("Matches"))
		self._build_result_tab(self._tabview.tab("Record Result"))
		self._build_coordinate_tab(self._tabview.tab("Coordinate"))
		self._build_register_tab(self._tabview.tab("Register"))

		self._unsubscribe = self._service.session.subscribe(
			lambda state: self.after(0, lambda: self._on_session_changed(state))
		)
		self.protocol("WM_DELETE_WINDOW", self._close)

		self._run_in_background(self._service.session.bootstrap)

	def _build_profile_tab(self, tab):
		ctk.CTkButton(tab, text="Refresh Profile", command=self._refresh_profile).pack(
			anchor="w", padx=12, pady=(12, 6)
		)
		self._profile_output = ctk.CTkTextbox(tab, height=420)
		self._profile_output.pack(fill="both", expand=True, padx=12, pady=(4, 12))

	def _build_matches_tab(self, tab):
		ctk.CTkButton(tab, text="Load Matches", command=self._load_matches).pack(
			anchor="w", padx=12, pady=(12, 6)
		)
		self._matches_output = ctk.CTkTextbox(tab, height=420)
		self._matches_output.pack(fill="both", expand=True, padx=12, pady=(4, 12))

	def _build_result_tab(self, tab):
		self._result_match_id = ctk.CTkEntry(tab, placeholder_text="Match id")
		self._result_match_id.pack(fill="x", padx=12, pady=(12, 6))

		sets_row = ctk.CTkFrame(tab)
		sets_row.pack(fill="x", padx=12, pady=6)
		self._set_entries = []
		for set_number in range(1, 4):
			ctk.CTkLabel(sets_row, text=f"Set {set_number}").pack(side="left", padx=(8, 4), pady=8)
			team1_entry = ctk.CTkEntry(sets_row, width=48, placeholder_text="T1")
			team1_entry.pack(side="left", padx=2, pady=8)
			team2_entry = ctk.CTkEntry(sets_row, width=48, placeholder_text="T2")
			team2_entry.pack(side="left", padx=(2, 12), pady=8)
			self._set_entries.append((team1_entry, team2_entry))

		self._result_confirmed = ctk.BooleanVar(value=False)
		ctk.CTkCheckBox(
			tab,
			text="I confirm the result entered is correct",
			variable=self._result_confirmed,
		).pack(anchor="w", padx=12, pady=4)

		ctk.CTkButton(tab, text="Submit Result", command=self._submit_result).pack(
			anchor="w", padx=12, pady=8
		)
		self._result_output = ctk.CTkTextbox(tab, height=200)
		self._result_output.pack(fill="both", expand=True, padx=12, pady=(4, 12))

	def _build_coordinate_tab(self, tab):
		self._coordinate_match_id = ctk.CTkEntry(tab, placeholder_text="Match id")
		self._coordinate_match_id.pack(fill="x", padx=12, pady=(12, 6))

		ctk.CTkButton(tab, text="Load Match", command=self._load_match).pack(anchor="w", padx=12, pady=4)

		self._coordinate_date = ctk.CTkEntry(tab, placeholder_text="Date (YYYY-MM-DD)")
		self._coordinate_date.pack(fill="x", padx=12, pady=6)
		self._coordinate_date.insert(0, date.today().isoformat())

		self._coordinate_time = ctk.CTkOptionMenu(
			tab,
			values=[f"{hour:02d}:00" for hour in range(8, 24)],
		)
		self._coordinate_time.pack(anchor="w", padx=12, pady=6)
		self._coordinate_time.set("12:00")

		self._coordinate_complex = ctk.CTkEntry(tab, placeholder_text="Complex")
		self._coordinate_complex.pack(fill="x", padx=12, pady=6)

		ctk.CTkButton(tab, text="Propose Schedule", command=self._propose_schedule).pack(
			anchor="w", padx=12, pady=8
		)
		self._coordinate_output = ctk.CTkTextbox(tab, height=200)
		self._coordinate_output.pack(fill="both", expand=True, padx=12, pady=(4, 12))

	def _build_register_tab(self, tab):
		self._register_username = ctk.CTkEntry(tab, placeholder_text="Username")
		self._register_username.pack(fill="x", padx=12, pady=(12, 6))
		self._register_email = ctk.CTkEntry(tab, placeholder_text="Email")
		self._register_email.pack(fill="x", padx=12, pady=6)
		self._register_password = ctk.CTkEntry(tab, placeholder_text="Password", show="*")
		self._register_password.pack(fill="x", padx=12, pady=6)
		self._register_confirm = ctk.CTkEntry(tab, placeholder_text="Confirm password", show="*")
		self._register_confirm.pack(fill="x", padx=12, pady=6)

		self._register_terms = ctk.BooleanVar(value=False)
		ctk.CTkCheckBox(tab, text="I accept the terms and conditions", variable=self._register_terms).pack(
			anchor="w", padx=12, pady=4
		)
		ctk.CTkButton(tab, text="Create Account", command=self._register).pack(anchor="w", padx=12, pady=8)

	def _on_session_changed(self, state: SessionState):
		self._status_label.configure(text=format_session_status(state))
		self._render_output(self._profile_output, format_profile(state.user))
		signed_in = state.is_signed_in
		self._sign_in_btn.configure(state="disabled" if signed_in else "normal")
		self._sign_out_btn.configure(state="normal" if signed_in else "disabled")
		if not signed_in and not state.is_loading:
			self._render_output(self._matches_output, "")

	def _sign_in(self):
		identifier = self._identifier.get()
		password = self._password.get()
		self._password.delete(0, "end")
		self._run_in_background(lambda: self._service.login(identifier, password))

	def _sign_out(self):
		self._run_in_background(self._service.sign_out)

	def _register(self):
		values = (
			self._register_username.get(),
			self._register_email.get(),
			self._register_password.get(),
			self._register_confirm.get(),
			bool(self._register_terms.get()),
		)

		def on_success(state: SessionState):
			if not state.is_signed_in:
				self._show_error("Account created. Confirm your email, then sign in.")

		self._run_in_background(lambda: self._service.register(*values), on_success=on_success)

	def _refresh_profile(self):
		def on_success(profile):
			if profile is None:
				self._show_error("Could not refresh the profile. Try again.")

		self._run_in_background(self._service.refresh_profile, on_success=on_success)

	def _load_matches(self):
		self._render_output(self._matches_output, "Loading matches...")
		self._run_in_background(
			self._service.dashboard,
			on_success=lambda dashboard: self._render_output(self._matches_output, format_dashboard(dashboard)),
		)

	def _load_match(self):
		document_id = self._coordinate_match_id.get()
		self._run_in_background(
			lambda: self._service.match_for_user(document_id),
			on_success=lambda result: self._render_output(self._coordinate_output, format_match(*result)),
		)

	def _submit_result(self):
		document_id = self._result_match_id.get()
		raw_sets = [(team1.get(), team2.get()) for team1, team2 in self._set_entries]
		confirmed = bool(self._result_confirmed.get())
		self._run_in_background(
			lambda: self._service.record_result(document_id, raw_sets, confirmed),
			on_success=lambda text: self._render_output(self._result_output, f"Result submitted: {text}"),
		)

	def _propose_schedule(self):
		document_id = self._coordinate_match_id.get()
		raw_date = self._coordinate_date.get().strip()
		start_time = self._coordinate_time.get()
		complex_name = self._coordinate_complex.get()
		try:
			match_day = date.fromisoformat(raw_date)
		except ValueError:
			self._show_error(f"Invalid date {raw_date!r}, expected YYYY-MM-DD")
			return

		self._run_in_background(
			lambda: self._service.propose_schedule(document_id, match_day, start_time, complex_name),
			on_success=lambda result: self._render_output(self._coordinate_output, format_match(*result)),
		)

	def _run_in_background(self, call, on_success=None):
		self._show_error("")
		self._start_progress()

		def worker():
			try:
				result = call()
				if on_success:
					self.after(0, lambda: on_success(result))
			except Exception as exc:
				logger.debug("Request failed\n%s", traceback.format_exc())
				message = f"{type(exc).__name__}: {exc}"
				self.after(0, lambda: self._show_error(message))

			self.after(0, self._stop_progress)

		threading.Thread(target=worker, daemon=True).start()

	def _start_progress(self):
		self._pending_requests += 1
		if self._pending_requests == 1:
			self._progress_bar.start()

	def _stop_progress(self):
		self._pending_requests = max(0, self._pending_requests - 1)
		if self._pending_requests == 0:
			self._progress_bar.stop()
			self._progress_bar.set(0)

	def _show_error(self, message: str):
		self._error_label.configure(text=message)

	def _close(self):
		self._unsubscribe()
		self.destroy()

	@staticmethod
	def _render_output(text_widget: ctk.CTkTextbox, text: str):
		text_widget.delete("1.0", "end")
		text_widget.insert("1.0", text)


def build_service(settings: AppSettings) -> PadelService:
	http_client = HttpClient(settings)
	secure_store, data_store = build_stores(settings)
	session = SessionManager(
		profile_api=ProfileApi(settings, http_client),
		secure_store=secure_store,
		data_store=data_store,
	)
	return PadelService(
		session=session,
		auth_api=AuthApi(settings, http_client),
		matches_api=MatchesApi(settings, http_client),
	)


def run_app() -> None:
	ctk.set_appearance_mode("System")
	ctk.set_default_color_theme("blue")

	try:
		settings = AppSettings.from_env()
	except ConfigurationError as exc:
		configure_logging()
		logger.error("Configuration error: %s", exc)
		app = ctk.CTk()
		app.title("Padel League - Configuration Error")
		app.geometry("760x360")
		message = ctk.CTkTextbox(app)
		message.pack(fill="both", expand=True, padx=16, pady=16)
		message.insert(
			"1.0",
			"Configuration error. Fix the environment variables and restart:\n\n"
			f"{exc}\n\n"
			"Settings:\n"
			"- PADEL_API_URL\n"
			"- PADEL_API_PREFIX\n"
			"- PADEL_TIMEOUT_SECONDS\n"
			"- PADEL_STORAGE_DIR\n"
			"- PADEL_SECURE_STORAGE\n"
			"- PADEL_LOG_LEVEL\n",
		)
		app.mainloop()
		return

	configure_logging(settings.log_level)
	window = MainWindow(build_service(settings))
	window.mainloop()


if __name__ == "__main__":
	run_app()
