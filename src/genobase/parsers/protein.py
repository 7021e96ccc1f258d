"""
UniProt protein and PSI-MI TAB interaction parsers.
"""

import gzip
from pathlib import Path
from typing import List, Optional

import pandas as pd
from Bio import SeqIO

from ..core.exceptions import ParseError
from ..core.types import PathLike
from ..serializers import RecordSerializer
from .base import RecordParser, list_input_files


class ProteinParser(RecordParser):
    """
    Reads UniProt XML split files, keeping entries of one species.

    species is matched against the entry organism, so it should be the
    scientific name rather than a catalog id.
    """

    def __init__(self, uniprot_dir: PathLike, species: str, serializer: RecordSerializer):
        super().__init__(serializer)
        self.uniprot_dir = Path(uniprot_dir)
        self.species = species

    def _keep(self, organism: Optional[str]) -> bool:
        # organism reads "Homo sapiens (Human)" when a common name is present
        return organism is not None and self.species.casefold() in organism.casefold()

    def parse(self) -> None:
        xml_files = list_input_files(self.uniprot_dir, (".xml", ".xml.gz"))
        if not xml_files:
            raise ParseError(f"No UniProt XML file found in {self.uniprot_dir}", source=str(self.uniprot_dir))

        for xml_file in xml_files:
            self.logger.info(f"Reading {xml_file}")
            opener = gzip.open if xml_file.suffix == ".gz" else open
            with opener(xml_file, "rb") as handle:
                for entry in SeqIO.parse(handle, "uniprot-xml"):
                    annotations = entry.annotations
                    if not self._keep(annotations.get("organism")):
                        continue
                    self.emit({
                        "id": entry.id,
                        "name": entry.name,
                        "accessions": annotations.get("accessions", []),
                        "description": entry.description,
                        "genes": annotations.get("gene_name_primary", None),
                        "organism": annotations.get("organism"),
                        "keywords": annotations.get("keywords", []),
                        "xrefs": list(entry.dbxrefs),
                        "sequence": str(entry.seq),
                        "length": len(entry.seq),
                    })


MITAB_COLUMNS = [
    "interactorA", "interactorB", "altIdsA", "altIdsB", "aliasesA", "aliasesB",
    "detectionMethod", "firstAuthor", "publications", "taxidA", "taxidB",
    "interactionTypes", "sourceDatabases", "interactionIds", "confidence",
]


def _split_mitab(value) -> List[str]:
    if not isinstance(value, str) or value == "-":
        return []
    return value.split("|")


class InteractionParser(RecordParser):
    """
    Reads PSI-MI TAB 2.5 protein-protein interactions.

    Rows are kept when either interactor's taxonomy column mentions the
    requested species, e.g. taxid:9606(Homo sapiens).
    """

    def __init__(self, psimi_tab_file: PathLike, species: str, serializer: RecordSerializer, chunksize: int = 50000):
        super().__init__(serializer)
        self.psimi_tab_file = Path(psimi_tab_file)
        self.species = species
        self.chunksize = chunksize

    def _mentions_species(self, taxids: pd.Series) -> pd.Series:
        return taxids.fillna("").str.casefold().str.contains(self.species.casefold(), regex=False)

    def parse(self) -> None:
        reader = pd.read_csv(
            self.psimi_tab_file,
            sep="\t",
            header=None,
            names=MITAB_COLUMNS,
            usecols=range(len(MITAB_COLUMNS)),
            comment="#",
            dtype=str,
            chunksize=self.chunksize,
        )
        for chunk in reader:
            mask = self._mentions_species(chunk["taxidA"]) | self._mentions_species(chunk["taxidB"])
            for row in chunk[mask].to_dict(orient="records"):
                self.emit({
                    "interactorA": row["interactorA"],
                    "interactorB": row["interactorB"],
                    "detectionMethod": _split_mitab(row["detectionMethod"]),
                    "publications": _split_mitab(row["publications"]),
                    "types": _split_mitab(row["interactionTypes"]),
                    "sources": _split_mitab(row["sourceDatabases"]),
                    "ids": _split_mitab(row["interactionIds"]),
                    "confidence": _split_mitab(row["confidence"]),
                })
