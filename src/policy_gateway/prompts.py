"""Prompt catalogue for policy extraction.

System prompts and template factories for the two policy sources:
free-text policy holder records and IBM COBOL fixed-width files.
The fixed-width layout and the example output are opaque text; they
are injected as system messages and never interpreted here.
"""

from pathlib import Path

from policy_gateway.entities import ModelProfile, PromptTemplate, get_model_config
from policy_gateway.exceptions import ConfigurationError

INSURANCE_DATA_TRANSFORMER_PROMPT = (
    "You are an insurance policy holder data transformer that extracts any incoming data, "
    "identify the fields listed below and transform the output into expected output format given below. "
    "Fields to be identified: Firstname, Lastname, Gender, DateOfBirth, SSN, PolicyNumber. "
    "Transformation Rules: (1) For any given input format of DateOfBirth, the transformed dob "
    "should be MM/dd/yyyy format. "
    "(2) For any Gender input, the output should be just 1 character 'M' for Male and 'F' for Female. "
    "Expected output JSON format: {policyNumber: {{PolicyNumber}}, firstName: {{FirstName}}, "
    "lastName: {{LastName}}, gender: {{Gender}}, dob: {{DateOfBirth}}, ssn: {{SSN}}}"
)

IBM_POLICY_DATA_TRANSFORMER_PROMPT = (
    "You are a fixed-width ETL parser. Do not infer or guess. No free reasoning. "
    "Direct substring extraction. Return JSON only whose schema is given in previous system message. "
    "Extract substrings based on fixed positions only whose schema is given in previous system message. "
    "The input contains multiple record types: main policy holder data, life policy records, "
    "annuity policy records, and beneficiary records. "
    "Convert dates to MM/dd/yyyy format and parse numeric values properly. "
    "Wherever 2 character USA state codes are there, convert to fullname. Examples are GA: Georgia, "
    "CA: California, NY: New York, TX: Texas, FL: Florida, MN: Minnesota, DE: Delaware, MD: Maryland. "
)

OPTIMIZED_IBM_POLICY_TRANSFORMER = (
    "Extract key insurance policy data from IBM fixed-width format. "
    "Focus on: policy holder name, policy number, policy type, status, dates, premium amounts. "
    "Return concise JSON with essential fields only. "
    "Convert dates to MM/dd/yyyy format. Parse numeric values properly. "
    'Response format: {"policies":[{"policyNumber":"...","firstName":"...","lastName":"...",'
    '"policyType":"...","status":"...","premium":...,"effectiveDate":"..."}]}'
)

LIFE_INSURANCE_POLICY_JSON_OUTPUT_EXAMPLE = (
    "Expected output JSON format:  "
    '[{"name":"Alice Johnson","policy":[{"id":2,"isPaid":true,"policyType":"Life Policy",'
    '"policyNumber":"TL6534868","productType":"Term Life","estimatedAnnuitizationDate":null,'
    '"policyStatus":"In-Force","anniversaryDate":"03/05/2019","premium":2650,"dividend":500,'
    '"deathBenefit":500000,"outstandingLoan":1800,"netCashValue":22650,"accountValue":29150,'
    '"surrenderValue":26650,"faceAmount":500000,"modeOfPayment":"Annual",'
    '"beneficiary":{"primaryBeneficiary":[{"firstName":"Tom","lastName":"Smith",'
    '"relationship":"Father","birthDate":"12/25/1988","percentage":"80","ssn":"6631",'
    '"address":"2090 Marina AVE","city":"Petaluma","state":"Georgia","zipCode":"95954",'
    '"phone":"971-201-2090","email":"tom.smith@umbrella.com"}],'
    '"contingentBeneficiary":[{"firstName":"Liam","lastName":"Smith","relationship":"Uncle",'
    '"birthDate":"10/20/1998","percentage":"100","ssn":"6633","address":"2090 Marina AVE",'
    '"city":"Petaluma","state":"Georgia","zipCode":"95954","phone":"971-201-2090",'
    '"email":"liam.smith@umbrella.com"}]},'
    '"premiumDueDate":"03/11/2031","policyIssueDate":"03/05/2018","policyIssueState":"Minnesota",'
    '"isWaiverOfPremiumCoverage":true,"waiverOfPremiumCoverage":100000,'
    '"underwritingClass":"Standard","premiumFrequency":"Semi-Annual",'
    '"renewalDate":"01/02/2025","maturityDate":"03/05/2027","annualPremium":2650}]}]'
)

LIFE_INSURANCE_POLICY_DETAIL_DATA_TRANSFORMER_FROM_FIXED_FILE = (
    "You are an expert IBM mainframe data parser specialized in extracting life insurance policy "
    "data from COBOL fixed-width format files. "
    "Parse the incoming fixed-width formatted data and extract all policy holder information, "
    "policy details, and beneficiary data. "
    "The input contains multiple record types: main policy holder data, life policy records, "
    "annuity policy records, and beneficiary records. "
    "Follow the field position definitions provided in the comments to accurately extract data. "
    "Transform all extracted data into a comprehensive JSON array structure. "
    "Transformation Rules: "
    "(1) Parse fixed-width fields according to position definitions in comments. "
    "(2) Convert zero-padded numeric fields to proper integer/decimal values. "
    "(3) Handle text fields by trimming trailing spaces. "
    "(4) Convert Yes/No and True/False values to appropriate boolean or string format as needed. "
    "(5) Group policies by insured person name. "
    "(6) Include all beneficiary details for each policy. "
    "(7) Handle null/empty values appropriately. "
    "(8) Ensure all dates are in MM/dd/yyyy format. "
    "(9) Wherever 2 character USA state codes are there like state: GA, convert them to full "
    "state names like state: Georgia. "
    "(10) Wherever any value is Yes or No, convert them into boolean true or false. "
    "(11) IMPORTANT: Return only clean JSON without any comments, explanations, or additional "
    "text. Do not include // or /* */ style comments in the response. "
    " " + LIFE_INSURANCE_POLICY_JSON_OUTPUT_EXAMPLE
)


def _params(profile: ModelProfile | str) -> dict:
    return dict(get_model_config(profile).params)


def read_reference_text(path: str | Path, description: str) -> str:
    """Read a static reference document (schema, example output) at startup.

    Raises:
        ConfigurationError: If the file is missing, unreadable or empty
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read {description} from {path}", original_error=e) from e
    if not text.strip():
        raise ConfigurationError(f"{description} at {path} is empty")
    return text


def unstructured_policy_template(profile: ModelProfile | str = ModelProfile.GPT41_MYAGENT) -> PromptTemplate:
    """Template for free-text policy holder records."""
    return PromptTemplate(
        system_messages=(INSURANCE_DATA_TRANSFORMER_PROMPT,),
        model_params=_params(profile),
    )


def ibm_policy_template(
    schema_text: str,
    example_output: str = LIFE_INSURANCE_POLICY_JSON_OUTPUT_EXAMPLE,
    profile: ModelProfile | str = ModelProfile.GPT41_MYAGENT,
) -> PromptTemplate:
    """Template for IBM fixed-width files.

    Sends the field layout, the example output and the parsing rules
    as three system messages, in that order.
    """
    return PromptTemplate(
        system_messages=(schema_text, example_output, IBM_POLICY_DATA_TRANSFORMER_PROMPT),
        model_params=_params(profile),
    )


def life_policy_detail_template(profile: ModelProfile | str = ModelProfile.GPT41_MYAGENT) -> PromptTemplate:
    """Single-message template for detailed life insurance extraction."""
    return PromptTemplate(
        system_messages=(LIFE_INSURANCE_POLICY_DETAIL_DATA_TRANSFORMER_FROM_FIXED_FILE,),
        model_params=_params(profile),
    )


def optimized_ibm_policy_template(profile: ModelProfile | str = ModelProfile.GPT41_MYAGENT) -> PromptTemplate:
    """Shorter IBM template focused on the essential fields."""
    return PromptTemplate(
        system_messages=(OPTIMIZED_IBM_POLICY_TRANSFORMER,),
        model_params=_params(profile),
    )
