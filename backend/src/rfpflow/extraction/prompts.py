"""Instruction templates for the three extraction tasks.

Each task pairs a system prompt with an instruction; the context payload is
appended by the extraction client as pretty-printed JSON.
"""

JSON_ONLY_RULES = """Rules:
- Output ONLY valid JSON. No markdown. No code blocks. No explanations.
- The response must start with { and end with }.
- If a field is unknown or not present, use null (do NOT invent)."""

SOLICITATION_SYNTHESIS_SYSTEM = f"""You are a helpful assistant that extracts structured data from procurement descriptions.
{JSON_ONLY_RULES}"""

SOLICITATION_SYNTHESIS_INSTRUCTION = """Convert the procurement request in CONTEXT.description into a structured RFP.

STRICT JSON SCHEMA (keys must match exactly):
{
  "title": string,                 // concise title for the RFP
  "description": string,           // the full description
  "budget": number|null,           // numeric budget amount
  "deadline": string|null,         // ISO date of the delivery deadline
  "requirements": [
    {
      "item": string,              // e.g. "laptops", "monitors"
      "quantity": number|null,
      "specifications": { string: string }   // e.g. {"RAM": "16GB"}
    }
  ],
  "paymentTerms": string|null,     // e.g. "net 30"
  "warranty": string|null
}"""

PROPOSAL_EXTRACTION_SYSTEM = f"""You are a helpful assistant that extracts structured proposal data from vendor emails.
{JSON_ONLY_RULES}"""

PROPOSAL_EXTRACTION_INSTRUCTION = """Given the RFP in CONTEXT.rfp and the vendor's email in CONTEXT.emailBody, extract the proposal.

STRICT JSON SCHEMA (keys must match exactly):
{
  "pricing": {                     // itemized pricing keyed by item name
    string: { "quantity": number|null, "unitPrice": number|null, "total": number|null }
  },
  "totalPrice": number|null,
  "deliveryTime": string|null,
  "paymentTerms": string|null,
  "warranty": string|null,
  "additionalTerms": string|null,  // any other important terms or conditions
  "completeness": number           // 0-100, how well the proposal addresses the RFP requirements
}
All prices are plain numbers without currency symbols or thousands separators."""

COMPARISON_SYSTEM = f"""You are a helpful assistant that compares vendor proposals.
{JSON_ONLY_RULES}"""

COMPARISON_INSTRUCTION = """Compare the vendor proposals in CONTEXT.proposals, all submitted for the same RFP.

STRICT JSON SCHEMA (keys must match exactly):
{
  "summary": string,               // brief summary comparing all proposals
  "scores": { vendorName: number },          // 0-100 per vendor
  "recommendation": string,        // recommended vendor name and reasoning (2-3 sentences)
  "strengths": { vendorName: [string] },
  "weaknesses": { vendorName: [string] }
}
Use the vendorName values exactly as given as keys."""
