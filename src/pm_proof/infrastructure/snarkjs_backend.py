# src/pm_proof/infrastructure/snarkjs_backend.py
"""Groth16 proving through the snarkjs CLI.

    snarkjs groth16 fullprove input.json circuit.wasm circuit.zkey proof.json public.json

The child process runs under asyncio so the event loop stays free; if the
awaiting task is cancelled or the timeout fires, the child is killed before
the error propagates. Every failure mode ends in ProvingUnavailableError.
"""
import asyncio
import json
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any

from src.pm_common.errors import ProvingUnavailableError
from src.pm_proof.domain.models import BackendOutput, Groth16Proof

logger = logging.getLogger(__name__)


def parse_snarkjs_proof(raw: dict[str, Any]) -> Groth16Proof:
    """snarkjs proof.json → verifier layout.

    snarkjs writes G2 points as [[x0, x1], [y0, y1], [1, 0]]; the EVM pairing
    precompile expects each pair reversed.
    """
    if raw.get("protocol", "groth16") != "groth16":
        raise ValueError(f"unexpected proof protocol {raw.get('protocol')!r}")
    pi_a, pi_b, pi_c = raw["pi_a"], raw["pi_b"], raw["pi_c"]
    return Groth16Proof(
        a=(int(pi_a[0]), int(pi_a[1])),
        b=(
            (int(pi_b[0][1]), int(pi_b[0][0])),
            (int(pi_b[1][1]), int(pi_b[1][0])),
        ),
        c=(int(pi_c[0]), int(pi_c[1])),
    )


class SnarkjsProverBackend:
    def __init__(
        self,
        snarkjs_bin: str,
        wasm_path: str | Path,
        zkey_path: str | Path,
        timeout: float,
    ) -> None:
        self._bin = snarkjs_bin
        self._wasm = Path(wasm_path)
        self._zkey = Path(zkey_path)
        self._timeout = timeout

    def check_available(self) -> str:
        """Resolve the executable and artifacts or raise ProvingUnavailableError."""
        executable = shutil.which(self._bin)
        if executable is None:
            raise ProvingUnavailableError(f"snarkjs executable not found: {self._bin}")
        for artifact in (self._wasm, self._zkey):
            if not artifact.is_file():
                raise ProvingUnavailableError(f"circuit artifact missing: {artifact}")
        return executable

    async def prove(self, witness: dict[str, str]) -> BackendOutput:
        executable = self.check_available()
        try:
            return await self._prove_in_workdir(executable, witness)
        except OSError as exc:
            raise ProvingUnavailableError(f"proof working directory failed: {exc}") from exc

    async def _prove_in_workdir(self, executable: str, witness: dict[str, str]) -> BackendOutput:
        with tempfile.TemporaryDirectory(prefix="darkpool-proof-") as tmp:
            work = Path(tmp)
            input_path = work / "input.json"
            proof_path = work / "proof.json"
            public_path = work / "public.json"
            input_path.write_text(json.dumps(witness), encoding="utf-8")

            await self._run(
                executable, "groth16", "fullprove",
                str(input_path), str(self._wasm), str(self._zkey),
                str(proof_path), str(public_path),
            )

            try:
                proof = parse_snarkjs_proof(json.loads(proof_path.read_text(encoding="utf-8")))
                public_signals = [
                    int(s) for s in json.loads(public_path.read_text(encoding="utf-8"))
                ]
            except (OSError, ValueError, KeyError, IndexError, TypeError) as exc:
                raise ProvingUnavailableError(f"unreadable snarkjs output: {exc}") from exc
        return BackendOutput(proof=proof, public_signals=public_signals)

    async def _run(self, *cmd: str) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ProvingUnavailableError(f"cannot start snarkjs: {exc}") from exc

        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            await _kill(proc)
            raise ProvingUnavailableError(
                f"snarkjs timed out after {self._timeout:.0f}s"
            ) from exc
        except asyncio.CancelledError:
            await _kill(proc)
            raise

        if proc.returncode != 0:
            detail = stderr.decode(errors="replace").strip()[:500]
            raise ProvingUnavailableError(f"snarkjs exited with {proc.returncode}: {detail}")


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
        await proc.wait()
    logger.info("snarkjs process %s terminated", proc.pid)
