"""
Genome sequence and gene model parsers.
"""

from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Optional

from Bio import SeqIO

from ..core.exceptions import ParseError
from ..core.types import PathLike
from ..serializers import RecordSerializer
from .base import RecordParser, list_input_files, open_text


class GenomeSequenceFastaParser(RecordParser):
    """Splits every FASTA sequence into fixed-size chunks."""

    CHUNK_SIZE = 2000

    def __init__(self, fasta_file: PathLike, serializer: RecordSerializer, chunk_size: int = CHUNK_SIZE):
        super().__init__(serializer)
        self.fasta_file = Path(fasta_file)
        self.chunk_size = chunk_size

    def parse(self) -> None:
        with open_text(self.fasta_file) as handle:
            for seq_record in SeqIO.parse(handle, "fasta"):
                sequence = str(seq_record.seq)
                self.logger.info(f"Chunking {seq_record.id} ({len(sequence)} bp)")
                for chunk_id, offset in enumerate(range(0, len(sequence), self.chunk_size)):
                    chunk = sequence[offset:offset + self.chunk_size]
                    self.emit({
                        "sequenceName": seq_record.id,
                        "chunkId": f"{seq_record.id}_{chunk_id}_{self.chunk_size // 1000}k",
                        "start": offset + 1,
                        "end": offset + len(chunk),
                        "sequence": chunk,
                    })


def parse_gtf_attributes(attributes: str) -> Dict[str, str]:
    """Parse the attribute column of a GTF line."""
    parsed = {}
    for item in attributes.strip().split(";"):
        item = item.strip()
        if not item or " " not in item:
            continue
        key, value = item.split(" ", 1)
        parsed[key] = value.strip().strip('"')
    return parsed


class GeneParser(RecordParser):
    """
    Builds gene records from the GTF files of a directory.

    Transcripts and exons are nested under their gene; exon sequences are
    taken from the reference genome FASTA.
    """

    def __init__(self, gene_dir: PathLike, genome_fasta: PathLike, serializer: RecordSerializer):
        super().__init__(serializer)
        self.gene_dir = Path(gene_dir)
        self.genome_fasta = Path(genome_fasta)
        self._genome: Optional[Dict[str, Any]] = None

    def _load_genome(self) -> Dict[str, Any]:
        if self._genome is None:
            if self.genome_fasta.suffix == ".gz":
                with open_text(self.genome_fasta) as handle:
                    self._genome = SeqIO.to_dict(SeqIO.parse(handle, "fasta"))
            else:
                self._genome = SeqIO.index(str(self.genome_fasta), "fasta")
        return self._genome

    def _exon_sequence(self, chromosome: str, start: int, end: int, strand: str) -> Optional[str]:
        genome = self._load_genome()
        if chromosome not in genome:
            return None
        seq = genome[chromosome].seq[start - 1:end]
        if strand == "-":
            seq = seq.reverse_complement()
        return str(seq)

    def parse(self) -> None:
        gtf_files = list_input_files(self.gene_dir, (".gtf", ".gtf.gz"))
        if not gtf_files:
            raise ParseError(f"No GTF file found in {self.gene_dir}", source=str(self.gene_dir))

        for gtf_file in gtf_files:
            genes = self._read_gtf(gtf_file)
            for gene in genes.values():
                gene["transcripts"] = list(gene["transcripts"].values())
                self.emit(gene)

    def _read_gtf(self, gtf_file: Path) -> "OrderedDict[str, Dict[str, Any]]":
        genes: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        self.logger.info(f"Reading {gtf_file}")
        with open_text(gtf_file) as handle:
            for line_number, line in enumerate(handle, 1):
                if line.startswith("#") or not line.strip():
                    continue
                fields = line.rstrip("\n").split("\t")
                if len(fields) < 9:
                    raise ParseError("Expected 9 GTF columns", source=str(gtf_file), line_number=line_number)

                chromosome, source, feature, start, end, _, strand, _, attributes = fields[:9]
                attrs = parse_gtf_attributes(attributes)
                gene_id = attrs.get("gene_id")
                if gene_id is None:
                    continue

                gene = genes.get(gene_id)
                if gene is None:
                    gene = genes[gene_id] = {
                        "id": gene_id,
                        "name": attrs.get("gene_name", gene_id),
                        "biotype": attrs.get("gene_biotype", attrs.get("gene_type", "")),
                        "chromosome": chromosome,
                        "start": int(start),
                        "end": int(end),
                        "strand": strand,
                        "source": source,
                        "transcripts": OrderedDict(),
                    }
                gene["start"] = min(gene["start"], int(start))
                gene["end"] = max(gene["end"], int(end))

                transcript_id = attrs.get("transcript_id")
                if transcript_id is None:
                    continue
                transcript = gene["transcripts"].setdefault(transcript_id, {
                    "id": transcript_id,
                    "name": attrs.get("transcript_name", transcript_id),
                    "biotype": attrs.get("transcript_biotype", attrs.get("transcript_type", "")),
                    "chromosome": chromosome,
                    "start": int(start),
                    "end": int(end),
                    "strand": strand,
                    "exons": [],
                })
                transcript["start"] = min(transcript["start"], int(start))
                transcript["end"] = max(transcript["end"], int(end))

                if feature == "exon":
                    transcript["exons"].append({
                        "id": attrs.get("exon_id", f"{transcript_id}_{attrs.get('exon_number', '')}"),
                        "exonNumber": int(attrs.get("exon_number", 0)),
                        "start": int(start),
                        "end": int(end),
                        "strand": strand,
                        "sequence": self._exon_sequence(chromosome, int(start), int(end), strand),
                    })
        return genes

    def disconnect(self) -> None:
        genome, self._genome = self._genome, None
        try:
            if genome is not None and hasattr(genome, "close"):
                genome.close()
        finally:
            super().disconnect()
