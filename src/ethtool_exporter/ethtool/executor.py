from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ethtool_exporter.core.logger import get_logger


logger = get_logger(__name__)


@dataclass
class CommandResult:
    """
    Résultat d'exécution d'une commande externe.

    - args : arguments du processus
    - stdout : sortie standard brute (non strip, les lignes comptent)
    - stderr : erreur brute (strip)
    - return_code : code de retour du process
    """

    args: List[str]
    stdout: str
    stderr: str
    return_code: int

    @property
    def ok(self) -> bool:
        return self.return_code == 0


class CommandExecutor:
    """
    Exécuteur générique de commandes externes (ethtool -S, ethtool --version).

    Objectifs :
      - Lancer le processus sans shell, en capturant stdout/stderr.
      - Timeout optionnel (None = pas de limite).
      - Ne jamais casser la collecte : en cas d'erreur de lancement ou de
        timeout, log + None. Un code de retour non nul est renvoyé tel quel
        dans CommandResult, c'est à l'appelant de décider.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> Optional[CommandResult]:
        """
        Exécute la commande et retourne un CommandResult.

        Retour :
          - CommandResult si le processus a pu être lancé et s'est terminé
          - None si le binaire est introuvable, non exécutable, ou a expiré
        """
        proc_args = [str(a) for a in args]
        logger.debug("Arguments du processus: %r", proc_args)

        try:
            result = subprocess.run(
                proc_args,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                # Un octet non UTF-8 ne doit invalider que sa propre ligne
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning(
                "Commande expirée (timeout=%.2fs): %s",
                self.timeout,
                " ".join(proc_args),
            )
            return None
        except (OSError, ValueError) as exc:
            logger.debug("Impossible de lancer la commande %s: %s", proc_args[0], exc)
            return None

        return CommandResult(
            args=proc_args,
            stdout=result.stdout or "",
            stderr=(result.stderr or "").strip(),
            return_code=result.returncode,
        )
