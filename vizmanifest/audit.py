from __future__ import annotations
import base64
import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

GENESIS_CHAIN = "0" * 64


def _canonical(record: Dict[str, Any]) -> bytes:
	return json.dumps(record, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")


class AuditLogger:
	"""Append-only JSONL log of manifest runs.

	Each record carries ``chain``, a SHA-256 over the previous chain head and the
	record body, and ``sig``, an Ed25519 signature over everything but itself.
	The current chain head lives in ``audit.sig``.
	"""

	def __init__(self, audit_dir: Path) -> None:
		self.audit_dir = Path(audit_dir)
		self.audit_dir.mkdir(parents=True, exist_ok=True)
		self.log_file = self.audit_dir / "audit.jsonl"
		self.sig_file = self.audit_dir / "audit.sig"
		self._priv_file = self.audit_dir / "audit_ed25519_priv.pem"
		self._pub_file = self.audit_dir / "audit_ed25519_pub.pem"
		self._chain = self._load_chain()
		self._priv, self._pub = self._load_or_create_keys()

	@property
	def chain_head(self) -> str:
		return self._chain

	def _load_chain(self) -> str:
		if self.sig_file.exists():
			return self.sig_file.read_text(encoding="utf-8").strip()
		return GENESIS_CHAIN

	def _next_chain(self, record: Dict[str, Any]) -> str:
		sha = hashlib.sha256()
		sha.update(self._chain.encode("utf-8"))
		sha.update(_canonical(record))
		return sha.hexdigest()

	def _load_or_create_keys(self) -> tuple[Ed25519PrivateKey, Ed25519PublicKey]:
		if self._priv_file.exists() and self._pub_file.exists():
			priv = serialization.load_pem_private_key(self._priv_file.read_bytes(), password=None)
			pub = serialization.load_pem_public_key(self._pub_file.read_bytes())
			return priv, pub  # type: ignore[return-value]
		priv = Ed25519PrivateKey.generate()
		pub = priv.public_key()
		self._priv_file.write_bytes(
			priv.private_bytes(
				encoding=serialization.Encoding.PEM,
				format=serialization.PrivateFormat.PKCS8,
				encryption_algorithm=serialization.NoEncryption(),
			)
		)
		self._pub_file.write_bytes(
			pub.public_bytes(
				encoding=serialization.Encoding.PEM,
				format=serialization.PublicFormat.SubjectPublicKeyInfo,
			)
		)
		return priv, pub

	def verify_record(self, record: Dict[str, Any]) -> bool:
		sig_b64 = record.get("sig")
		if not sig_b64:
			return False
		rec = dict(record)
		rec.pop("sig", None)
		try:
			self._pub.verify(base64.b64decode(sig_b64), _canonical(rec))
		except InvalidSignature:
			return False
		return True

	def verify_chain(self) -> bool:
		chain = GENESIS_CHAIN
		for record in self.records():
			body = {k: record[k] for k in ("ts", "action", "details") if k in record}
			sha = hashlib.sha256()
			sha.update(chain.encode("utf-8"))
			sha.update(_canonical(body))
			chain = sha.hexdigest()
			if record.get("chain") != chain or not self.verify_record(record):
				return False
		return chain == self._chain

	def records(self) -> Iterator[Dict[str, Any]]:
		if not self.log_file.exists():
			return
		with self.log_file.open("r", encoding="utf-8") as f:
			for line in f:
				line = line.strip()
				if line:
					yield json.loads(line)

	def log_action(self, action: str, details: Dict[str, Any] | None = None) -> Dict[str, Any]:
		record: Dict[str, Any] = {
			"ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
			"action": action,
			"details": details or {},
		}
		new_chain = self._next_chain(record)
		record["chain"] = new_chain
		record["sig"] = base64.b64encode(self._priv.sign(_canonical(record))).decode("ascii")
		with self.log_file.open("a", encoding="utf-8") as f:
			f.write(json.dumps(record, ensure_ascii=False) + "\n")
		self.sig_file.write_text(new_chain, encoding="utf-8")
		self._chain = new_chain
		return record


class NullAuditLogger:
	"""Stand-in used when auditing is switched off in the config."""

	def log_action(self, action: str, details: Dict[str, Any] | None = None) -> Dict[str, Any]:
		return {"action": action, "details": details or {}}
