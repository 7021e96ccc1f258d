"""
Regulatory region and conservation score parsers.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from ..core.exceptions import ParseError
from ..core.types import PathLike
from ..serializers import RecordSerializer
from .base import RecordParser, list_input_files, open_text


GFF_COLUMNS = ["chromosome", "source", "featureType", "start", "end", "score", "strand", "frame", "attributes"]


class RegulatoryRegionParser(RecordParser):
    """Reads the GFF files of a regulatory build directory."""

    def __init__(self, regulation_dir: PathLike, serializer: RecordSerializer, chunksize: int = 100000):
        super().__init__(serializer)
        self.regulation_dir = Path(regulation_dir)
        self.chunksize = chunksize

    def parse(self) -> None:
        gff_files = list_input_files(self.regulation_dir, (".gff", ".gff.gz", ".gff3", ".gff3.gz"))
        if not gff_files:
            raise ParseError(f"No GFF file found in {self.regulation_dir}", source=str(self.regulation_dir))

        for gff_file in gff_files:
            self.logger.info(f"Reading {gff_file}")
            reader = pd.read_csv(
                gff_file,
                sep="\t",
                comment="#",
                header=None,
                names=GFF_COLUMNS,
                dtype={"chromosome": str},
                chunksize=self.chunksize,
            )
            for chunk in reader:
                for row in chunk.itertuples(index=False):
                    self.emit({
                        "chromosome": row.chromosome,
                        "source": row.source,
                        "featureType": row.featureType,
                        "start": int(row.start),
                        "end": int(row.end),
                        "strand": row.strand,
                        **self._attributes(row.attributes),
                    })

    @staticmethod
    def _attributes(attributes) -> Dict[str, str]:
        if not isinstance(attributes, str):
            return {}
        pairs = (item.split("=", 1) for item in attributes.split(";") if "=" in item)
        return {key.strip(): value.strip() for key, value in pairs}


FIXED_STEP = re.compile(r"fixedStep\s+chrom=(\S+)\s+start=(\d+)\s+step=(\d+)")


class ConservedRegionParser(RecordParser):
    """
    Converts wigFix conservation scores into fixed-size score chunks.

    Each subdirectory (or file prefix) names the score source, e.g. phastCons
    or phylop. Output goes to one file per chromosome.
    """

    CHUNK_SIZE = 2000

    def __init__(self, conservation_dir: PathLike, chunk_size: int, serializer: RecordSerializer):
        super().__init__(serializer)
        self.conservation_dir = Path(conservation_dir)
        self.chunk_size = chunk_size if chunk_size > 0 else self.CHUNK_SIZE

    def _wig_files(self) -> List[Path]:
        files = []
        for directory in [self.conservation_dir, *sorted(p for p in self.conservation_dir.iterdir() if p.is_dir())]:
            files.extend(list_input_files(directory, (".wigFix", ".wigFix.gz", ".wig", ".wig.gz")))
        return files

    def _source(self, wig_file: Path) -> str:
        if wig_file.parent != self.conservation_dir:
            return wig_file.parent.name
        return wig_file.name.split(".")[0]

    def parse(self) -> None:
        wig_files = self._wig_files()
        if not wig_files:
            raise ParseError(f"No wigFix file found in {self.conservation_dir}", source=str(self.conservation_dir))
        for wig_file in wig_files:
            self.logger.info(f"Reading {wig_file}")
            self._parse_wig(wig_file, self._source(wig_file))

    def _parse_wig(self, wig_file: Path, source: str) -> None:
        chromosome: Optional[str] = None
        position = 0
        step = 1
        chunk_start = 0
        values: List[float] = []

        def flush():
            if chromosome is not None and values:
                self.emit({
                    "chromosome": chromosome,
                    "start": chunk_start,
                    "end": chunk_start + (len(values) - 1) * step,
                    "type": source,
                    "values": list(values),
                }, f"conservation_chr{chromosome}")

        with open_text(wig_file) as handle:
            for line_number, line in enumerate(handle, 1):
                line = line.strip()
                if not line:
                    continue
                if line.startswith("fixedStep"):
                    flush()
                    match = FIXED_STEP.match(line)
                    if match is None:
                        raise ParseError("Malformed fixedStep header", source=str(wig_file), line_number=line_number)
                    chromosome = match.group(1).replace("chr", "", 1)
                    position = int(match.group(2))
                    step = int(match.group(3))
                    chunk_start = position
                    values = []
                    continue

                if chromosome is None:
                    raise ParseError("Score before any fixedStep header", source=str(wig_file), line_number=line_number)
                if len(values) == self.chunk_size:
                    flush()
                    chunk_start = position
                    values = []
                values.append(float(line))
                position += step
        flush()
